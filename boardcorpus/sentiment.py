"""
SentimentScorer: Lexicon-based sentiment of words, groups and messages.

All outputs share one lexicon lookup. Words outside the lexicon score
zero and are left out of every table. Bigram negation analysis reports
how much unigram scoring miscounts words that follow a negator; it does
not flip any score.
"""

import logging
import math
from typing import Iterable, Sequence, Tuple

import polars as pl

from .config import DEFAULT_MIN_MATCHED_WORDS, NEGATION_WORDS
from .resources import Lexicon

logger = logging.getLogger(__name__)

WORD_SENTIMENT_SCHEMA = {'word': pl.Utf8, 'occurrences': pl.Int64, 'contribution': pl.Float64}
GROUP_SENTIMENT_SCHEMA = {'group_id': pl.Utf8, 'score': pl.Float64}
MESSAGE_SENTIMENT_SCHEMA = {
    'document_id': pl.Utf8,
    'mean_sentiment': pl.Float64,
    'matched_word_count': pl.Int64,
}
NEGATION_SCHEMA = {
    'negator': pl.Utf8,
    'word': pl.Utf8,
    'count': pl.Int64,
    'score': pl.Float64,
    'contribution': pl.Float64,
}


class SentimentScorer:
    """
    Scores count tables against a shared, read-only lexicon.

    Implements:
    - Word contributions (occurrences x polarity)
    - Group and message mean sentiment
    - Negation-aware bigram diagnostics
    """

    def __init__(
        self,
        lexicon: Lexicon,
        min_matched_words: int = DEFAULT_MIN_MATCHED_WORDS,
        negation_words: Sequence[str] = NEGATION_WORDS
    ):
        """
        Initialize the scorer.

        Args:
            lexicon: Word to polarity mapping
            min_matched_words: Minimum lexicon matches for a message to be ranked
            negation_words: Words treated as negators in bigram analysis
        """
        if min_matched_words < 0:
            raise ValueError(f"min_matched_words must be >= 0, got {min_matched_words}")

        self.lexicon = lexicon
        self.min_matched_words = min_matched_words
        self.negation_words = tuple(w.lower() for w in negation_words)

    def _lexicon_frame(self, column: str = 'word') -> pl.DataFrame:
        return pl.DataFrame(
            {column: list(self.lexicon.keys()), 'score': list(self.lexicon.values())},
            schema={column: pl.Utf8, 'score': pl.Float64},
        )

    def _matched(self, table: pl.DataFrame, column: str = 'word') -> pl.DataFrame:
        """Inner-join a count table with the lexicon, adding a `score` column."""
        return table.join(self._lexicon_frame(column), on=column, how='inner')

    def score_tokens(self, tokens: Iterable[str]) -> Tuple[float, int]:
        """
        Mean polarity of the lexicon words in a token sequence.

        Args:
            tokens: Tokens of one message

        Returns:
            Tuple of (mean sentiment, matched word count); (0.0, 0) when
            no token is in the lexicon
        """
        scores = [self.lexicon[t] for t in tokens if t in self.lexicon]
        if not scores:
            return 0.0, 0
        return math.fsum(scores) / len(scores), len(scores)

    def word_contributions(self, term_counts: pl.DataFrame) -> pl.DataFrame:
        """
        Total sentiment contribution of each lexicon word in the corpus.

        Args:
            term_counts: TermCount (or DocumentTermCount) table with word, count

        Returns:
            DataFrame with word, occurrences, contribution, sorted by
            absolute contribution
        """
        matched = self._matched(term_counts)
        table = (
            matched
            .group_by('word')
            .agg(
                pl.col('count').sum().alias('occurrences'),
                (pl.col('count') * pl.col('score')).sum().alias('contribution'),
            )
            .select(list(WORD_SENTIMENT_SCHEMA))
            .cast(WORD_SENTIMENT_SCHEMA)
            .sort([pl.col('contribution').abs(), pl.col('word')], descending=[True, False])
        )
        return table

    def group_sentiment(self, term_counts: pl.DataFrame) -> pl.DataFrame:
        """
        Average polarity per group, weighted by word counts.

        Args:
            term_counts: TermCount table with group_id, word, count

        Returns:
            DataFrame with group_id, score (groups without matches omitted)
        """
        matched = self._matched(term_counts)
        return (
            matched
            .group_by('group_id')
            .agg(
                ((pl.col('score') * pl.col('count')).sum() / pl.col('count').sum())
                .alias('score')
            )
            .cast(GROUP_SENTIMENT_SCHEMA)
            .sort('group_id')
        )

    def message_sentiment(
        self,
        document_term_counts: pl.DataFrame,
        ranked: bool = True
    ) -> pl.DataFrame:
        """
        Mean polarity per message.

        Args:
            document_term_counts: DocumentTermCount table
            ranked: If True, drop messages with fewer than
                    min_matched_words matches and sort by mean sentiment
                    (most positive first)

        Returns:
            DataFrame with document_id, mean_sentiment, matched_word_count
        """
        matched = self._matched(document_term_counts)
        table = (
            matched
            .group_by('document_id')
            .agg(
                ((pl.col('score') * pl.col('count')).sum() / pl.col('count').sum())
                .alias('mean_sentiment'),
                pl.col('count').sum().alias('matched_word_count'),
            )
            .cast(MESSAGE_SENTIMENT_SCHEMA)
        )

        if not ranked:
            return table.sort('document_id')

        excluded = table.filter(pl.col('matched_word_count') < self.min_matched_words).height
        logger.info("Ranking %d messages (%d below %d matched words)",
                    table.height - excluded, excluded, self.min_matched_words)
        return (
            table
            .filter(pl.col('matched_word_count') >= self.min_matched_words)
            .sort(['mean_sentiment', 'document_id'], descending=[True, False])
        )

    def negation_contributions(self, bigram_counts: pl.DataFrame) -> pl.DataFrame:
        """
        Sentiment miscounted because a word follows a negator.

        Args:
            bigram_counts: Table with word1, word2, count (per-document or
                           already aggregated)

        Returns:
            DataFrame with negator, word, count, score, contribution,
            where contribution = score * count, sorted by absolute
            contribution
        """
        negated = (
            bigram_counts
            .filter(pl.col('word1').is_in(list(self.negation_words)))
            .group_by(['word1', 'word2'])
            .agg(pl.col('count').sum())
            .rename({'word1': 'negator', 'word2': 'word'})
        )
        return (
            self._matched(negated)
            .with_columns((pl.col('score') * pl.col('count')).alias('contribution'))
            .select(list(NEGATION_SCHEMA))
            .cast(NEGATION_SCHEMA)
            .sort([pl.col('contribution').abs(), 'negator', 'word'],
                  descending=[True, False, False])
        )

    def __repr__(self) -> str:
        return (f"SentimentScorer(lexicon={self.lexicon.name}, "
                f"min_matched_words={self.min_matched_words})")
