"""Tests for lexicon-based sentiment scoring."""

import polars as pl
import pytest

from boardcorpus import FrequencyAggregator, Lexicon, SentimentScorer

DOC_SCHEMA = {"document_id": pl.Utf8, "word": pl.Utf8, "count": pl.Int64}
BIGRAM_SCHEMA = {"word1": pl.Utf8, "word2": pl.Utf8, "count": pl.Int64}


@pytest.fixture
def scorer():
    return SentimentScorer(Lexicon({"good": 2, "bad": -2}))


def test_message_below_minimum_matches_is_not_ranked(scorer) -> None:
    counts = pl.DataFrame([("m1", "good", 2), ("m1", "bad", 1), ("m1", "orbit", 4)],
                          schema=DOC_SCHEMA, orient="row")

    unranked = scorer.message_sentiment(counts, ranked=False).row(0, named=True)
    ranked = scorer.message_sentiment(counts)

    assert unranked["mean_sentiment"] == pytest.approx(0.667, abs=1e-3)
    assert unranked["matched_word_count"] == 3
    assert ranked.is_empty()


def test_ranked_messages_sorted_most_positive_first(scorer) -> None:
    counts = pl.DataFrame(
        [("m1", "good", 5), ("m2", "bad", 6), ("m3", "good", 3), ("m3", "bad", 3)],
        schema=DOC_SCHEMA, orient="row")

    ranked = scorer.message_sentiment(counts)

    assert ranked["document_id"].to_list() == ["m1", "m3", "m2"]
    assert ranked["mean_sentiment"].to_list() == pytest.approx([2.0, 0.0, -2.0])


def test_score_tokens(scorer) -> None:
    mean, matched = scorer.score_tokens(["good", "good", "bad", "orbit"])

    assert mean == pytest.approx(2 / 3)
    assert matched == 3
    assert scorer.score_tokens(["orbit"]) == (0.0, 0)


def test_negation_contribution(scorer) -> None:
    bigrams = pl.DataFrame([("not", "good", 3), ("very", "good", 4), ("not", "orbit", 2)],
                           schema=BIGRAM_SCHEMA, orient="row")

    table = scorer.negation_contributions(bigrams)

    assert table.rows(named=True) == [
        {"negator": "not", "word": "good", "count": 3, "score": 2.0, "contribution": 6.0},
    ]


def test_negation_contributions_aggregate_across_documents(corpus, lexicon) -> None:
    bigrams = FrequencyAggregator().bigram_counts(corpus)

    table = SentimentScorer(lexicon).negation_contributions(bigrams)
    rows = {(r["negator"], r["word"]): r for r in table.iter_rows(named=True)}

    assert rows[("not", "good")]["count"] == 2
    assert rows[("not", "good")]["contribution"] == 4.0
    assert rows[("not", "safe")]["contribution"] == 1.0


def test_word_contributions(corpus, lexicon) -> None:
    term_counts = FrequencyAggregator().group_term_counts(corpus)

    table = SentimentScorer(lexicon).word_contributions(term_counts)
    rows = {r["word"]: r for r in table.iter_rows(named=True)}

    assert set(rows) <= set(lexicon)
    assert rows["bad"]["occurrences"] == 3
    assert rows["bad"]["contribution"] == -6.0
    assert table["word"][0] in {"bad", "good"}


def test_group_sentiment(scorer) -> None:
    counts = pl.DataFrame(
        [("a", "good", 3), ("a", "bad", 1), ("a", "orbit", 10), ("b", "orbit", 2)],
        schema={"group_id": pl.Utf8, "word": pl.Utf8, "count": pl.Int64}, orient="row")

    table = scorer.group_sentiment(counts)

    assert table.rows() == [("a", pytest.approx(1.0))]


def test_lexicon_misses_produce_no_rows(scorer) -> None:
    counts = pl.DataFrame([("m1", "orbit", 9)], schema=DOC_SCHEMA, orient="row")

    assert scorer.word_contributions(counts).is_empty()
    assert scorer.message_sentiment(counts, ranked=False).is_empty()


def test_custom_negation_words() -> None:
    scorer = SentimentScorer(Lexicon({"good": 1}), negation_words=["hardly"])
    bigrams = pl.DataFrame([("not", "good", 1), ("hardly", "good", 2)],
                           schema=BIGRAM_SCHEMA, orient="row")

    assert scorer.negation_contributions(bigrams)["negator"].to_list() == ["hardly"]
