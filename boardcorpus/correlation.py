"""
Pairwise Pearson correlation between groups' word count vectors.

Groups are kept as sparse {word: count} mappings. For a pair of groups
the correlation is taken over the union of their words, with a count of
zero where a group never uses a word; the dense word x group matrix is
never built.
"""

import logging
import math
from collections import defaultdict
from itertools import combinations
from typing import Dict, Mapping

import polars as pl

logger = logging.getLogger(__name__)

CORRELATION_SCHEMA = {'group_a': pl.Utf8, 'group_b': pl.Utf8, 'correlation': pl.Float64}


def correlation_between(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Pearson correlation of two sparse count vectors.

    Args:
        a: Word counts of the first group
        b: Word counts of the second group

    Returns:
        Correlation in [-1, 1]; 0.0 when either vector is constant over
        the shared word set
    """
    words = sorted(set(a) | set(b))
    n = len(words)
    if n < 2:
        return 0.0

    xs = [float(a.get(w, 0)) for w in words]
    ys = [float(b.get(w, 0)) for w in words]
    mean_x = math.fsum(xs) / n
    mean_y = math.fsum(ys) / n

    cov = math.fsum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    var_x = math.fsum((x - mean_x) ** 2 for x in xs)
    var_y = math.fsum((y - mean_y) ** 2 for y in ys)

    if var_x == 0.0 or var_y == 0.0:
        return 0.0

    r = cov / math.sqrt(var_x * var_y)
    return max(-1.0, min(1.0, r))


def group_vectors(term_counts: pl.DataFrame) -> Dict[str, Dict[str, int]]:
    """Build one sparse {word: count} vector per group from a TermCount table."""
    vectors: Dict[str, Dict[str, int]] = defaultdict(dict)
    for group_id, word, count in term_counts.select(['group_id', 'word', 'count']).iter_rows():
        if count:
            vectors[group_id][word] = vectors[group_id].get(word, 0) + count
    return dict(vectors)


def pairwise_correlation(term_counts: pl.DataFrame) -> pl.DataFrame:
    """
    Correlate every unordered pair of groups.

    Args:
        term_counts: TermCount table with group_id, word, count

    Returns:
        DataFrame with group_a, group_b, correlation; one row per pair,
        group_a < group_b
    """
    vectors = group_vectors(term_counts)

    rows = [
        (group_a, group_b, correlation_between(vectors[group_a], vectors[group_b]))
        for group_a, group_b in combinations(sorted(vectors), 2)
    ]

    logger.info("Computed %d group correlations for %d groups", len(rows), len(vectors))
    return pl.DataFrame(rows, schema=CORRELATION_SCHEMA, orient='row')
