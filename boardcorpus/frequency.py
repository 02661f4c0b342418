"""
FrequencyAggregator: Builds word count tables from tokenized documents.

Counting is a per-document map followed by a merge by integer addition,
so documents can be counted in worker processes and merged in any order
with the same result.
"""

import logging
from collections import Counter, defaultdict
from multiprocessing import Pool
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import polars as pl
from scipy.sparse import csr_matrix
from tqdm import autonotebook

from .config import DEFAULT_MIN_WORD_TOTAL, DEFAULT_N_JOBS
from .document import Document

logger = logging.getLogger(__name__)

TERM_COUNT_SCHEMA = {'group_id': pl.Utf8, 'word': pl.Utf8, 'count': pl.Int64}
DOCUMENT_TERM_COUNT_SCHEMA = {'document_id': pl.Utf8, 'word': pl.Utf8, 'count': pl.Int64}
BIGRAM_COUNT_SCHEMA = {
    'group_id': pl.Utf8,
    'document_id': pl.Utf8,
    'word1': pl.Utf8,
    'word2': pl.Utf8,
    'count': pl.Int64,
}

# (doc_id, group_id, counts)
DocumentCounts = Tuple[str, str, Counter]


def count_document(document: Document) -> DocumentCounts:
    """Count the unigram tokens of one document."""
    return document.doc_id, document.group_id, Counter(document.tokens())


def count_document_bigrams(document: Document) -> DocumentCounts:
    """Count the bigrams of one document."""
    return document.doc_id, document.group_id, Counter(document.bigrams())


def merge_counts(partials: Iterable[Counter]) -> Counter:
    """
    Merge partial counts by addition.

    Args:
        partials: Counters to combine

    Returns:
        A new Counter with the summed counts
    """
    merged: Counter = Counter()
    for partial in partials:
        merged.update(partial)
    return merged


class FrequencyAggregator:
    """
    Aggregates token counts into group-level and document-level tables.

    With n_jobs > 1 documents are counted in a process pool; results are
    collected in document order so the output does not depend on worker
    scheduling.
    """

    def __init__(
        self,
        n_jobs: int = DEFAULT_N_JOBS,
        chunksize: Optional[int] = None,
        show_progress: bool = False
    ):
        """
        Initialize the aggregator.

        Args:
            n_jobs: Number of worker processes (1 = sequential)
            chunksize: Documents per pool task (None = derived from n_jobs)
            show_progress: Whether to show a progress bar
        """
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")
        self.n_jobs = n_jobs
        self.chunksize = chunksize
        self.show_progress = show_progress

    def _map(self, func, documents: Sequence[Document], desc: str) -> List[DocumentCounts]:
        """Apply a per-document counting function, in parallel if configured."""
        if self.n_jobs == 1 or len(documents) < 2:
            iterator = documents
            if self.show_progress:
                iterator = autonotebook.tqdm(documents, desc=desc)
            return [func(doc) for doc in iterator]

        chunksize = self.chunksize or max(1, len(documents) // (self.n_jobs * 4))
        with Pool(processes=self.n_jobs) as pool:
            results = pool.imap(func, documents, chunksize=chunksize)
            if self.show_progress:
                results = autonotebook.tqdm(results, total=len(documents), desc=desc)
            return list(results)

    def document_counts(self, documents: Iterable[Document]) -> List[DocumentCounts]:
        """
        Count tokens per document.

        Args:
            documents: Documents to count

        Returns:
            List of (doc_id, group_id, Counter) in input order
        """
        return self._map(count_document, list(documents), desc="Counting words")

    def group_term_counts(
        self,
        documents: Iterable[Document],
        document_counts: Optional[List[DocumentCounts]] = None
    ) -> pl.DataFrame:
        """
        Build the group-level TermCount table.

        Args:
            documents: Documents to aggregate (a Corpus works)
            document_counts: Precomputed output of document_counts()

        Returns:
            DataFrame with columns group_id, word, count
        """
        if document_counts is None:
            document_counts = self.document_counts(documents)

        by_group: Dict[str, List[Counter]] = defaultdict(list)
        for _, group_id, counts in document_counts:
            by_group[group_id].append(counts)

        rows = []
        for group_id in sorted(by_group):
            merged = merge_counts(by_group[group_id])
            rows.extend((group_id, word, count) for word, count in sorted(merged.items()))

        logger.info("Built term counts: %d groups, %d rows", len(by_group), len(rows))
        return pl.DataFrame(rows, schema=TERM_COUNT_SCHEMA, orient='row')

    def document_term_counts(
        self,
        documents: Iterable[Document],
        min_word_total: int = DEFAULT_MIN_WORD_TOTAL,
        document_counts: Optional[List[DocumentCounts]] = None
    ) -> pl.DataFrame:
        """
        Build the DocumentTermCount table used for topic modeling.

        A word is kept when its total across the given documents is at
        least `min_word_total`; rarer words are dropped.

        Args:
            documents: Documents to aggregate
            min_word_total: Minimum corpus frequency for a word to be kept
            document_counts: Precomputed output of document_counts()

        Returns:
            DataFrame with columns document_id, word, count
        """
        if document_counts is None:
            document_counts = self.document_counts(documents)

        totals = merge_counts(counts for _, _, counts in document_counts)
        kept = {word for word, total in totals.items() if total >= min_word_total}

        rows = []
        for doc_id, _, counts in sorted(document_counts, key=lambda item: item[0]):
            rows.extend(
                (doc_id, word, count)
                for word, count in sorted(counts.items()) if word in kept
            )

        logger.info("Built document term counts: %d of %d words kept (min total %d)",
                    len(kept), len(totals), min_word_total)
        return pl.DataFrame(rows, schema=DOCUMENT_TERM_COUNT_SCHEMA, orient='row')

    def bigram_counts(self, documents: Iterable[Document]) -> pl.DataFrame:
        """
        Build a per-document bigram count table.

        Args:
            documents: Documents to aggregate

        Returns:
            DataFrame with columns group_id, document_id, word1, word2, count
        """
        counted = self._map(count_document_bigrams, list(documents), desc="Counting bigrams")

        rows = []
        for doc_id, group_id, counts in sorted(counted, key=lambda item: item[0]):
            rows.extend(
                (group_id, doc_id, w1, w2, count)
                for (w1, w2), count in sorted(counts.items())
            )
        return pl.DataFrame(rows, schema=BIGRAM_COUNT_SCHEMA, orient='row')


def to_sparse_matrix(
    document_term_counts: pl.DataFrame
) -> Tuple[csr_matrix, List[str], List[str]]:
    """
    Convert a DocumentTermCount table to a sparse document x word matrix.

    Rows follow the sorted document ids and columns the sorted vocabulary,
    so the layout only depends on the table's content, not its row order.

    Args:
        document_term_counts: DataFrame with document_id, word, count

    Returns:
        Tuple of (matrix, document_ids, vocabulary)
    """
    document_ids = sorted(document_term_counts['document_id'].unique().to_list())
    vocabulary = sorted(document_term_counts['word'].unique().to_list())

    doc_index = {doc_id: i for i, doc_id in enumerate(document_ids)}
    word_index = {word: j for j, word in enumerate(vocabulary)}

    rows = np.array([doc_index[d] for d in document_term_counts['document_id']], dtype=np.int64)
    cols = np.array([word_index[w] for w in document_term_counts['word']], dtype=np.int64)
    data = document_term_counts['count'].to_numpy().astype(np.int64)

    matrix = csr_matrix((data, (rows, cols)), shape=(len(document_ids), len(vocabulary)))
    # Duplicate (document, word) rows are summed by the constructor
    matrix.sum_duplicates()
    return matrix, document_ids, vocabulary
