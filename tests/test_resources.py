"""Tests for stopword and lexicon loading."""

from pathlib import Path

import nltk.sentiment.vader
import pytest

from boardcorpus import resources
from boardcorpus.errors import LexiconFormatError
from boardcorpus.resources import Lexicon, load_lexicon, load_stopwords


def test_load_lexicon_reads_tab_separated_scores(tmp_path: Path) -> None:
    path = tmp_path / "afinn.txt"
    path.write_text("good\t3\nBad\t-3\n\ndoes not work\t-3\n", encoding="utf-8")

    lexicon = load_lexicon(path)

    assert lexicon.name == "afinn"
    assert dict(lexicon) == {"good": 3.0, "bad": -3.0, "does not work": -3.0}


def test_load_lexicon_keeps_last_duplicate(tmp_path: Path) -> None:
    path = tmp_path / "dup.tsv"
    path.write_text("good\t1\ngood\t2\n", encoding="utf-8")

    assert load_lexicon(path)["good"] == 2.0


@pytest.mark.parametrize("content", ["good 3\n", "good\tgreat\n", "\t2\n"])
def test_load_lexicon_rejects_malformed_lines(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.tsv"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(LexiconFormatError):
        load_lexicon(path)


def test_lexicon_misses_score_zero() -> None:
    lexicon = Lexicon({"good": 2})

    assert lexicon.score("good") == 2.0
    assert lexicon.score("orbit") == 0.0
    assert "orbit" not in lexicon
    assert len(lexicon) == 1


def test_load_stopwords_from_file(tmp_path: Path) -> None:
    path = tmp_path / "stop.txt"
    path.write_text("The\nand  # conjunction\n\nof\n", encoding="utf-8")

    stopwords = load_stopwords(path, extra=["Subject"])

    assert stopwords == frozenset({"the", "and", "of", "subject"})


class _FakeAnalyzer:
    def __init__(self):
        self.lexicon = {"Good": 1.9, "horrible": -2.5}


def test_lexicon_from_vader(monkeypatch) -> None:
    monkeypatch.setattr(resources, "_ensure_nltk_resource", lambda *args: None)
    monkeypatch.setattr(nltk.sentiment.vader, "SentimentIntensityAnalyzer", _FakeAnalyzer)

    lexicon = Lexicon.from_vader()

    assert lexicon.name == "vader"
    assert lexicon["good"] == pytest.approx(1.9)
    assert lexicon.score("horrible") == pytest.approx(-2.5)
    assert lexicon.score("orbit") == 0.0
