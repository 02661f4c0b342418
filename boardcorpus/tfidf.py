"""
TF-IDF weighting of group-level term counts.

Each group is treated as one document: tf is a word's share of the
group's tokens and idf is ln(groups / groups containing the word), with
no smoothing, so a word used by every group has a weight of exactly 0.
"""

import logging

import polars as pl

logger = logging.getLogger(__name__)

TF_IDF_SCHEMA = {
    'group_id': pl.Utf8,
    'word': pl.Utf8,
    'count': pl.Int64,
    'tf': pl.Float64,
    'idf': pl.Float64,
    'tf_idf': pl.Float64,
}


def tf_idf(term_counts: pl.DataFrame) -> pl.DataFrame:
    """
    Compute tf, idf and tf-idf for every (group_id, word) row.

    Args:
        term_counts: TermCount table with group_id, word, count

    Returns:
        DataFrame with group_id, word, count, tf, idf, tf_idf
    """
    counts = term_counts.filter(pl.col('count') > 0)
    if counts.is_empty():
        return pl.DataFrame(schema=TF_IDF_SCHEMA)

    n_groups = counts['group_id'].n_unique()

    table = (
        counts
        .with_columns(
            (pl.col('count') / pl.col('count').sum().over('group_id')).alias('tf'),
            (pl.lit(float(n_groups)) / pl.col('group_id').n_unique().over('word'))
            .log().alias('idf'),
        )
        .with_columns((pl.col('tf') * pl.col('idf')).alias('tf_idf'))
        .select(list(TF_IDF_SCHEMA))
        .cast(TF_IDF_SCHEMA)
        .sort(['group_id', 'word'])
    )

    logger.info("Computed tf-idf for %d rows across %d groups", table.height, n_groups)
    return table


def top_terms(table: pl.DataFrame, column: str = 'tf_idf', n: int = 10) -> pl.DataFrame:
    """
    Select the top-n rows per group by a score column.

    Ties are broken alphabetically by word so the selection is stable.

    Args:
        table: Table with group_id, word and the score column
        column: Column to rank by
        n: Rows to keep per group

    Returns:
        Filtered table sorted by group, then descending score
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")

    return (
        table
        .sort(['group_id', column, 'word'], descending=[False, True, False])
        .group_by('group_id', maintain_order=True)
        .head(n)
    )
