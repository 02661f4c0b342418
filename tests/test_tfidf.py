"""Tests for tf-idf weighting."""

import math

import polars as pl
import pytest

from boardcorpus import tf_idf, top_terms


def _term_counts(rows):
    return pl.DataFrame(rows, schema={"group_id": pl.Utf8, "word": pl.Utf8, "count": pl.Int64},
                        orient="row")


def test_words_unique_to_one_group_have_idf_ln2() -> None:
    counts = _term_counts([
        ("space", "orbit", 2), ("space", "lunar", 1),
        ("crypto", "cipher", 2), ("crypto", "key", 1),
    ])

    table = tf_idf(counts)

    for idf in table["idf"]:
        assert idf == pytest.approx(math.log(2))
    orbit = table.filter(pl.col("word") == "orbit").row(0, named=True)
    assert orbit["tf"] == pytest.approx(2 / 3)


def test_words_in_every_group_get_zero_weight() -> None:
    counts = _term_counts([
        ("a", "shared", 5), ("a", "alpha", 1),
        ("b", "shared", 1), ("b", "beta", 3),
        ("c", "shared", 2),
    ])

    shared = tf_idf(counts).filter(pl.col("word") == "shared")

    assert shared["idf"].to_list() == [0.0, 0.0, 0.0]
    assert shared["tf_idf"].to_list() == [0.0, 0.0, 0.0]


def test_tf_idf_is_exact_product_and_tf_sums_to_one(corpus) -> None:
    from boardcorpus import FrequencyAggregator

    table = tf_idf(FrequencyAggregator().group_term_counts(corpus))

    for row in table.iter_rows(named=True):
        assert row["tf_idf"] == row["tf"] * row["idf"]
        assert row["idf"] >= 0
    sums = table.group_by("group_id").agg(pl.col("tf").sum())["tf"].to_list()
    assert sums == pytest.approx([1.0, 1.0])


def test_empty_term_counts() -> None:
    table = tf_idf(_term_counts([]))

    assert table.is_empty()
    assert table.columns == ["group_id", "word", "count", "tf", "idf", "tf_idf"]


def test_top_terms_per_group() -> None:
    counts = _term_counts([
        ("a", "x", 5), ("a", "y", 3), ("a", "z", 3),
        ("b", "w", 1),
    ])

    top = top_terms(tf_idf(counts), column="count", n=2)

    assert top.select(["group_id", "word"]).rows() == [("a", "x"), ("a", "y"), ("b", "w")]


def test_top_terms_rejects_non_positive_n() -> None:
    with pytest.raises(ValueError):
        top_terms(tf_idf(_term_counts([("a", "x", 1)])), n=0)
