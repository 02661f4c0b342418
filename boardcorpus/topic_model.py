"""
TopicModel: Latent Dirichlet Allocation over document term counts.

Two inference backends are available:

- 'gibbs': collapsed Gibbs sampling. Sweeps run sequentially over a token
  layout sorted by document and word, driven by a single seeded numpy
  generator, so a given seed, table and topic count always give the same
  result. The caller can bound a run by sweeps, wall-clock seconds or a
  `should_stop` callback checked between sweeps.
- 'variational': batch variational EM from scikit-learn, seeded through
  `random_state`. It runs to completion once started.

Topic ids carry no meaning across runs: topic 0 of one fit may match
topic 2 of another.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

import numpy as np
import polars as pl
from scipy.special import gammaln
from sklearn.decomposition import LatentDirichletAllocation
from tqdm import autonotebook

from .config import (
    DEFAULT_ETA,
    DEFAULT_EVALUATE_EVERY,
    DEFAULT_MAX_ITER,
    DEFAULT_NUM_TOPICS,
    DEFAULT_PERP_TOL,
    DEFAULT_RANDOM_SEED,
    DEFAULT_TOL,
    DEFAULT_TOPIC_MODEL_METHOD,
    TOPIC_MODEL_METHODS,
)
from .errors import EmptyVocabularyError, InvalidPriorError, InvalidTopicCountError
from .frequency import to_sparse_matrix

logger = logging.getLogger(__name__)

BETA_SCHEMA = {'topic_id': pl.Int64, 'word': pl.Utf8, 'probability': pl.Float64}
GAMMA_SCHEMA = {'document_id': pl.Utf8, 'topic_id': pl.Int64, 'probability': pl.Float64}


@dataclass
class TopicModelResult:
    """
    Fitted topic model tables and run status.

    `converged` is False when the run ended on the sweep cap, the time
    limit or a cancellation; the tables are still the best iterate seen.
    """

    beta: pl.DataFrame
    gamma: pl.DataFrame
    converged: bool
    n_iter: int
    stop_reason: str
    method: str
    log_likelihood: List[float] = field(default_factory=list)

    @property
    def n_topics(self) -> int:
        return self.beta['topic_id'].n_unique()

    def top_terms(self, n: int = 10) -> pl.DataFrame:
        """Most probable n words of every topic."""
        return (
            self.beta
            .sort(['topic_id', 'probability', 'word'], descending=[False, True, False])
            .group_by('topic_id', maintain_order=True)
            .head(n)
        )

    def dominant_topics(self) -> pl.DataFrame:
        """Most probable topic of every document (ties go to the lowest id)."""
        return (
            self.gamma
            .sort(['document_id', 'probability', 'topic_id'], descending=[False, True, False])
            .group_by('document_id', maintain_order=True)
            .first()
        )


class TopicModel:
    """
    Infers k latent topics and per-document topic mixtures.

    Priors are symmetric: `alpha` on document-topic mixtures (default
    50 / k for Gibbs sampling, 1 / k for variational EM) and `eta` on
    topic-word distributions. The variational backend accepts priors up
    to 1 only.
    """

    def __init__(
        self,
        n_topics: int = DEFAULT_NUM_TOPICS,
        alpha: Optional[float] = None,
        eta: float = DEFAULT_ETA,
        seed: int = DEFAULT_RANDOM_SEED,
        max_iter: int = DEFAULT_MAX_ITER,
        tol: float = DEFAULT_TOL,
        evaluate_every: int = DEFAULT_EVALUATE_EVERY,
        max_seconds: Optional[float] = None,
        method: str = DEFAULT_TOPIC_MODEL_METHOD,
        show_progress: bool = False
    ):
        """
        Initialize the topic model.

        Args:
            n_topics: Number of topics k
            alpha: Document-topic prior (None = backend default)
            eta: Topic-word prior
            seed: Random seed; equal seeds give equal results
            max_iter: Hard cap on sweeps (Gibbs) or EM iterations
            tol: Relative log-likelihood change that counts as converged
            evaluate_every: Sweeps between log-likelihood evaluations
            max_seconds: Optional wall-clock budget for Gibbs sampling
            method: 'gibbs' or 'variational'
            show_progress: Whether to show a progress bar
        """
        if method not in TOPIC_MODEL_METHODS:
            raise ValueError(f"Unknown inference method: {method}")
        if max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {max_iter}")
        if evaluate_every < 1:
            raise ValueError(f"evaluate_every must be >= 1, got {evaluate_every}")
        if eta <= 0 or (alpha is not None and alpha <= 0):
            raise InvalidPriorError("Dirichlet priors must be positive")
        if method == 'variational' and (eta > 1 or (alpha is not None and alpha > 1)):
            raise InvalidPriorError(
                f"Variational inference needs priors in (0, 1], got alpha={alpha}, eta={eta}")

        self.n_topics = n_topics
        self.alpha = alpha
        self.eta = eta
        self.seed = seed
        self.max_iter = max_iter
        self.tol = tol
        self.evaluate_every = evaluate_every
        self.max_seconds = max_seconds
        self.method = method
        self.show_progress = show_progress

    @property
    def doc_topic_prior(self) -> Optional[float]:
        """
        Document-topic prior passed to the backend.

        An unset alpha is 50 / k for Gibbs sampling and None for the
        variational backend, which scikit-learn then sets to 1 / k.
        """
        if self.alpha is not None:
            return self.alpha
        if self.method == 'variational':
            return None
        return 50.0 / self.n_topics

    def _prepare(
        self,
        document_term_counts: pl.DataFrame,
        documents: Optional[Iterable[str]]
    ) -> pl.DataFrame:
        """Restrict the table to the requested documents and validate it."""
        if self.n_topics <= 0:
            raise InvalidTopicCountError(
                f"Number of topics must be positive, got {self.n_topics}")

        table = document_term_counts.filter(pl.col('count') > 0)
        if documents is not None:
            table = table.filter(pl.col('document_id').is_in(list(documents)))

        if table.is_empty():
            raise EmptyVocabularyError(
                "No words left to model; lower min_word_total or widen the document subset")

        n_documents = table['document_id'].n_unique()
        if self.n_topics > n_documents:
            raise InvalidTopicCountError(
                f"Cannot fit {self.n_topics} topics to {n_documents} documents")

        return table

    def fit(
        self,
        document_term_counts: pl.DataFrame,
        documents: Optional[Iterable[str]] = None,
        should_stop: Optional[Callable[[], bool]] = None
    ) -> TopicModelResult:
        """
        Fit the model.

        Args:
            document_term_counts: DocumentTermCount table (document_id, word, count)
            documents: Optional document ids to restrict the fit to
            should_stop: Optional callback; returning True ends Gibbs
                         sampling after the current sweep

        Returns:
            TopicModelResult with beta, gamma and convergence status

        Raises:
            InvalidTopicCountError: if k <= 0 or k exceeds the document count
            EmptyVocabularyError: if no words remain for the documents
        """
        table = self._prepare(document_term_counts, documents)
        matrix, document_ids, vocabulary = to_sparse_matrix(table)

        logger.info("Fitting %d topics (%s) on %d documents x %d words",
                    self.n_topics, self.method, len(document_ids), len(vocabulary))

        if self.method == 'variational':
            return self._fit_variational(matrix, document_ids, vocabulary)
        return self._fit_gibbs(matrix, document_ids, vocabulary, should_stop)

    def _fit_gibbs(self, matrix, document_ids, vocabulary, should_stop) -> TopicModelResult:
        n_docs, n_words = matrix.shape
        k = self.n_topics
        alpha = self.doc_topic_prior
        eta = self.eta
        eta_sum = n_words * eta

        # One entry per token occurrence, ordered by document then word
        doc_of_token = np.repeat(
            np.repeat(np.arange(n_docs), np.diff(matrix.indptr)), matrix.data)
        word_of_token = np.repeat(matrix.indices, matrix.data)
        n_tokens = len(word_of_token)

        rng = np.random.default_rng(self.seed)
        topic_of_token = rng.integers(0, k, size=n_tokens)

        doc_topic = np.zeros((n_docs, k), dtype=np.int64)
        word_topic = np.zeros((n_words, k), dtype=np.int64)
        np.add.at(doc_topic, (doc_of_token, topic_of_token), 1)
        np.add.at(word_topic, (word_of_token, topic_of_token), 1)
        topic_total = np.bincount(topic_of_token, minlength=k).astype(np.int64)

        history: List[float] = []
        best_ll = -np.inf
        best_state = None
        converged = False
        stop_reason = 'max_iter'
        n_iter = 0
        started = time.monotonic()

        sweeps = range(1, self.max_iter + 1)
        if self.show_progress:
            sweeps = autonotebook.tqdm(sweeps, desc="Gibbs sampling")

        for sweep in sweeps:
            if should_stop is not None and should_stop():
                stop_reason = 'cancelled'
                break
            if self.max_seconds is not None and time.monotonic() - started > self.max_seconds:
                stop_reason = 'time_limit'
                break

            uniforms = rng.random(n_tokens)
            for i in range(n_tokens):
                d = doc_of_token[i]
                w = word_of_token[i]
                old = topic_of_token[i]

                doc_topic[d, old] -= 1
                word_topic[w, old] -= 1
                topic_total[old] -= 1

                weights = (doc_topic[d] + alpha) * (word_topic[w] + eta) / (topic_total + eta_sum)
                cumulative = np.cumsum(weights)
                new = int(np.searchsorted(cumulative, uniforms[i] * cumulative[-1], side='right'))
                if new >= k:
                    new = k - 1

                topic_of_token[i] = new
                doc_topic[d, new] += 1
                word_topic[w, new] += 1
                topic_total[new] += 1

            n_iter = sweep
            if sweep % self.evaluate_every and sweep != self.max_iter:
                continue

            ll = self._log_likelihood(word_topic, topic_total)
            logger.debug("Sweep %d: log-likelihood %.4f", sweep, ll)
            if ll > best_ll:
                best_ll = ll
                best_state = (doc_topic.copy(), word_topic.copy())

            if history and abs(ll - history[-1]) <= self.tol * abs(history[-1]):
                history.append(ll)
                converged = True
                stop_reason = 'converged'
                break
            history.append(ll)

        if best_state is None:
            # Stopped before the first evaluation
            history.append(self._log_likelihood(word_topic, topic_total))
            best_state = (doc_topic.copy(), word_topic.copy())

        if not converged:
            logger.warning("Gibbs sampling stopped without converging (%s after %d sweeps)",
                           stop_reason, n_iter)

        best_doc_topic, best_word_topic = best_state
        beta = (best_word_topic.T + eta).astype(np.float64)
        gamma = (best_doc_topic + alpha).astype(np.float64)

        return TopicModelResult(
            beta=_beta_table(beta, vocabulary),
            gamma=_gamma_table(gamma, document_ids),
            converged=converged,
            n_iter=n_iter,
            stop_reason=stop_reason,
            method='gibbs',
            log_likelihood=history,
        )

    def _log_likelihood(self, word_topic: np.ndarray, topic_total: np.ndarray) -> float:
        """log p(w | z) of the current assignment with topic-word counts integrated out."""
        n_words, k = word_topic.shape
        eta = self.eta
        return float(
            k * (gammaln(n_words * eta) - n_words * gammaln(eta))
            + gammaln(word_topic + eta).sum()
            - gammaln(topic_total + n_words * eta).sum()
        )

    def _fit_variational(self, matrix, document_ids, vocabulary) -> TopicModelResult:
        lda = LatentDirichletAllocation(
            n_components=self.n_topics,
            doc_topic_prior=self.doc_topic_prior,
            topic_word_prior=self.eta,
            learning_method='batch',
            max_iter=self.max_iter,
            evaluate_every=self.evaluate_every,
            perp_tol=DEFAULT_PERP_TOL,
            random_state=self.seed,
        )
        doc_topic = lda.fit_transform(matrix)

        converged = lda.n_iter_ < self.max_iter
        if not converged:
            logger.warning("Variational EM stopped without converging after %d iterations",
                           lda.n_iter_)

        return TopicModelResult(
            beta=_beta_table(lda.components_, vocabulary),
            gamma=_gamma_table(doc_topic, document_ids),
            converged=converged,
            n_iter=int(lda.n_iter_),
            stop_reason='converged' if converged else 'max_iter',
            method='variational',
            log_likelihood=[float(lda.score(matrix))],
        )

    def __repr__(self) -> str:
        return f"TopicModel(k={self.n_topics}, method={self.method}, seed={self.seed})"


def _normalize_rows(weights: np.ndarray) -> np.ndarray:
    return weights / weights.sum(axis=1, keepdims=True)


def _beta_table(topic_word: np.ndarray, vocabulary: List[str]) -> pl.DataFrame:
    """Build the (topic_id, word, probability) table from unnormalized weights."""
    beta = _normalize_rows(np.asarray(topic_word, dtype=np.float64))
    k, n_words = beta.shape
    return pl.DataFrame(
        {
            'topic_id': np.repeat(np.arange(k), n_words),
            'word': list(vocabulary) * k,
            'probability': beta.ravel(),
        },
        schema=BETA_SCHEMA,
    )


def _gamma_table(doc_topic: np.ndarray, document_ids: List[str]) -> pl.DataFrame:
    """Build the (document_id, topic_id, probability) table from unnormalized weights."""
    gamma = _normalize_rows(np.asarray(doc_topic, dtype=np.float64))
    n_docs, k = gamma.shape
    return pl.DataFrame(
        {
            'document_id': [doc_id for doc_id in document_ids for _ in range(k)],
            'topic_id': np.tile(np.arange(k), n_docs),
            'probability': gamma.ravel(),
        },
        schema=GAMMA_SCHEMA,
    )
