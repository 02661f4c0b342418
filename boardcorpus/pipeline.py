"""
AnalysisPipeline: Runs every analysis stage over one corpus.

Word counts are computed once and shared by the tf-idf, correlation,
sentiment and topic model stages. A failing topic model request is
recorded and does not affect the tables already produced.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import polars as pl

from .config import AnalysisConfig
from .corpus import Corpus
from .correlation import pairwise_correlation
from .errors import BoardCorpusError
from .frequency import FrequencyAggregator
from .resources import Lexicon
from .sentiment import SentimentScorer
from .tfidf import tf_idf
from .topic_model import TopicModel, TopicModelResult

logger = logging.getLogger(__name__)


@dataclass
class TopicRequest:
    """A topic model fit over a subset of the corpus."""

    name: str
    groups: Optional[List[str]] = None
    n_topics: Optional[int] = None
    method: Optional[str] = None


@dataclass
class AnalysisResults:
    tables: Dict[str, pl.DataFrame] = field(default_factory=dict)
    topic_models: Dict[str, TopicModelResult] = field(default_factory=dict)
    errors: Dict[str, BoardCorpusError] = field(default_factory=dict)


class AnalysisPipeline:
    """
    Orchestrates counting, tf-idf, correlation, sentiment and LDA.

    Example:
        pipeline = AnalysisPipeline(corpus, lexicon, AnalysisConfig())
        results = pipeline.run([TopicRequest('sci', groups=sci_groups)])
    """

    def __init__(
        self,
        corpus: Corpus,
        lexicon: Lexicon,
        config: Optional[AnalysisConfig] = None,
        show_progress: bool = False
    ):
        self.config = config or AnalysisConfig()
        self.corpus = corpus.exclude_messages(self.config.denylist)
        excluded = len(corpus) - len(self.corpus)
        if excluded:
            logger.info("Excluded %d denylisted messages from the analysis", excluded)
        self.aggregator = FrequencyAggregator(
            n_jobs=self.config.n_jobs, show_progress=show_progress)
        self.scorer = SentimentScorer(
            lexicon,
            min_matched_words=self.config.min_matched_words,
            negation_words=self.config.negation_words,
        )
        self.show_progress = show_progress
        self._document_counts = None

    @property
    def document_counts(self):
        """Per-document word counts, computed once."""
        if self._document_counts is None:
            self._document_counts = self.aggregator.document_counts(self.corpus)
        return self._document_counts

    def count_tables(self) -> Dict[str, pl.DataFrame]:
        """Build the group-level and unfiltered document-level count tables."""
        return {
            'term_counts': self.aggregator.group_term_counts(
                self.corpus, document_counts=self.document_counts),
            'document_term_counts': self.aggregator.document_term_counts(
                self.corpus, min_word_total=0, document_counts=self.document_counts),
            'bigram_counts': self.aggregator.bigram_counts(self.corpus),
        }

    def fit_topics(
        self,
        request: TopicRequest,
        should_stop: Optional[Callable[[], bool]] = None
    ) -> TopicModelResult:
        """
        Fit one topic model over the documents of the requested groups.

        The word frequency threshold is applied within the subset. The
        request's method and topic count override the config when set.

        Raises:
            InvalidTopicCountError, EmptyVocabularyError, InvalidPriorError
        """
        subset = self.corpus if request.groups is None else self.corpus.filter_by_groups(request.groups)
        wanted = set(subset.documents)
        counts = [item for item in self.document_counts if item[0] in wanted]

        table = self.aggregator.document_term_counts(
            subset, min_word_total=self.config.min_word_total, document_counts=counts)

        model = TopicModel(
            n_topics=request.n_topics if request.n_topics is not None else self.config.num_topics,
            alpha=self.config.alpha,
            eta=self.config.eta,
            seed=self.config.random_seed,
            max_iter=self.config.max_iter,
            tol=self.config.tol,
            evaluate_every=self.config.evaluate_every,
            max_seconds=self.config.max_seconds,
            method=request.method if request.method is not None else self.config.topic_model_method,
            show_progress=self.show_progress,
        )
        return model.fit(table, should_stop=should_stop)

    def run(self, topic_requests: Iterable[TopicRequest] = ()) -> AnalysisResults:
        """
        Run all stages.

        Args:
            topic_requests: Topic model fits to perform

        Returns:
            AnalysisResults with every table produced and any per-request
            topic model errors
        """
        results = AnalysisResults()
        tables = results.tables
        tables.update(self.count_tables())

        tables['tf_idf'] = tf_idf(tables['term_counts'])
        tables['correlations'] = pairwise_correlation(tables['term_counts'])
        tables['word_sentiment'] = self.scorer.word_contributions(tables['term_counts'])
        tables['group_sentiment'] = self.scorer.group_sentiment(tables['term_counts'])
        tables['message_sentiment'] = self.scorer.message_sentiment(tables['document_term_counts'])
        tables['negation_contributions'] = self.scorer.negation_contributions(
            tables['bigram_counts'])

        for request in topic_requests:
            try:
                results.topic_models[request.name] = self.fit_topics(request)
            except BoardCorpusError as e:
                logger.error("Topic model '%s' failed: %s", request.name, e)
                results.errors[request.name] = e

        return results
