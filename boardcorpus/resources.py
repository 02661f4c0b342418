"""
Loading of the shared, read-only linguistic resources.

The stopword set and the sentiment lexicon are loaded once at start-up and
passed by reference into the Tokenizer and the SentimentScorer.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Union

import nltk

from .errors import LexiconFormatError

logger = logging.getLogger(__name__)


def _ensure_nltk_resource(resource_path: str, package: str):
    """Download an NLTK data package if it is not installed yet."""
    try:
        nltk.data.find(resource_path)
    except LookupError:
        nltk.download(package, quiet=True)


def load_stopwords(
    path: Optional[Union[str, Path]] = None,
    language: str = 'english',
    extra: Iterable[str] = ()
) -> FrozenSet[str]:
    """
    Load a stopword set.

    Args:
        path: Optional file with one stopword per line ('#' starts a comment).
              If None, uses the NLTK stopword corpus for `language`.
        language: Language of the NLTK stopword list
        extra: Additional stopwords

    Returns:
        Frozen set of case-folded stopwords
    """
    if path is not None:
        with open(path, 'r', encoding='utf-8') as f:
            words = [line.split('#', 1)[0].strip() for line in f]
    else:
        _ensure_nltk_resource('corpora/stopwords', 'stopwords')
        from nltk.corpus import stopwords
        words = stopwords.words(language)

    stopword_set = frozenset(w.lower() for w in list(words) + list(extra) if w)
    logger.info("Loaded %d stopwords", len(stopword_set))
    return stopword_set


class Lexicon(Mapping):
    """
    Immutable mapping from word to signed polarity score.

    Lookups of words outside the lexicon raise KeyError like any mapping;
    use `score()` to get 0.0 for misses.
    """

    def __init__(self, scores: Optional[Dict[str, float]] = None, name: str = 'custom'):
        self._scores: Dict[str, float] = {
            word.lower(): float(value) for word, value in (scores or {}).items()
        }
        self.name = name

    def __getitem__(self, word: str) -> float:
        return self._scores[word]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    def score(self, word: str) -> float:
        """Polarity of a word, 0.0 when the word is not in the lexicon."""
        return self._scores.get(word, 0.0)

    @classmethod
    def from_vader(cls) -> 'Lexicon':
        """Build a lexicon from the NLTK VADER word valences."""
        _ensure_nltk_resource('sentiment/vader_lexicon.zip', 'vader_lexicon')
        from nltk.sentiment.vader import SentimentIntensityAnalyzer

        return cls(SentimentIntensityAnalyzer().lexicon, name='vader')

    def __repr__(self) -> str:
        return f"Lexicon(name={self.name}, words={len(self)})"


def load_lexicon(path: Union[str, Path], name: Optional[str] = None) -> Lexicon:
    """
    Load a tab-separated `word<TAB>score` lexicon file (AFINN format).

    Blank lines are skipped. A word listed twice keeps its last score.

    Args:
        path: Path to the lexicon file
        name: Name for the lexicon (defaults to the file stem)

    Returns:
        Lexicon instance
    """
    path = Path(path)
    scores: Dict[str, float] = {}

    with path.open('r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.rstrip('\n')
            if not line.strip():
                continue

            word, sep, value = line.rpartition('\t')
            if not sep or not word.strip():
                raise LexiconFormatError(
                    f"{path}:{line_no}: expected 'word<TAB>score', got {line!r}")
            try:
                score = float(value)
            except ValueError:
                raise LexiconFormatError(
                    f"{path}:{line_no}: score {value!r} is not a number") from None

            word = word.strip().lower()
            if word in scores:
                logger.warning("%s:%d: duplicate lexicon entry %r, keeping last",
                               path, line_no, word)
            scores[word] = score

    logger.info("Loaded %d lexicon entries from %s", len(scores), path)
    return Lexicon(scores, name=name or path.stem)
