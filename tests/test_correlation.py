"""Tests for pairwise group correlation."""

import polars as pl
import pytest

from boardcorpus import pairwise_correlation
from boardcorpus.correlation import correlation_between


def _term_counts(rows):
    return pl.DataFrame(rows, schema={"group_id": pl.Utf8, "word": pl.Utf8, "count": pl.Int64},
                        orient="row")


@pytest.fixture
def term_counts():
    return _term_counts([
        ("sci.space", "orbit", 10), ("sci.space", "launch", 6), ("sci.space", "key", 1),
        ("sci.crypt", "cipher", 9), ("sci.crypt", "key", 7), ("sci.crypt", "orbit", 1),
        ("sci.astro", "orbit", 8), ("sci.astro", "launch", 5), ("sci.astro", "star", 2),
    ])


def test_one_edge_per_unordered_pair(term_counts) -> None:
    edges = pairwise_correlation(term_counts)

    pairs = edges.select(["group_a", "group_b"]).rows()
    assert sorted(pairs) == [
        ("sci.astro", "sci.crypt"),
        ("sci.astro", "sci.space"),
        ("sci.crypt", "sci.space"),
    ]
    assert all(a < b for a, b in pairs)


def test_correlation_is_symmetric_and_bounded(term_counts) -> None:
    from boardcorpus.correlation import group_vectors

    vectors = group_vectors(term_counts)
    for a in vectors:
        for b in vectors:
            assert correlation_between(vectors[a], vectors[b]) == correlation_between(
                vectors[b], vectors[a])

    for r in pairwise_correlation(term_counts)["correlation"]:
        assert -1.0 <= r <= 1.0


def test_similar_groups_correlate_more(term_counts) -> None:
    edges = {(a, b): r for a, b, r in pairwise_correlation(term_counts).iter_rows()}

    assert edges[("sci.astro", "sci.space")] > 0.5
    assert edges[("sci.astro", "sci.space")] > edges[("sci.crypt", "sci.space")]


def test_correlation_uses_union_of_pair_words() -> None:
    a = {"x": 1, "y": 2, "z": 3}
    b = {"x": 2, "y": 4, "z": 6}

    assert correlation_between(a, b) == pytest.approx(1.0)
    assert correlation_between({"x": 1}, {"y": 1}) == pytest.approx(-1.0)


def test_constant_vectors_correlate_zero() -> None:
    assert correlation_between({"x": 2, "y": 2}, {"x": 1, "y": 5}) == 0.0
    assert correlation_between({"x": 1}, {"x": 3}) == 0.0


def test_single_group_has_no_edges() -> None:
    edges = pairwise_correlation(_term_counts([("only", "word", 3)]))

    assert edges.is_empty()
    assert edges.columns == ["group_a", "group_b", "correlation"]
