"""
Tokenizer: Turns cleaned body lines into normalized word tokens.

Tokens are case-folded and stripped of punctuation. The unigram stream
keeps only words that end in a letter and are not stopwords; the bigram
stream keeps every normalized word so that negators survive.
"""

import re
from typing import AbstractSet, Iterable, Iterator, List, Optional, Tuple

# Runs of letters, digits and apostrophes ("don't", "o'clock", "486dx")
_WORD_PATTERN = re.compile(r"(?:[^\W_]|')+")
_ENDS_IN_LETTER = re.compile(r"[a-z]$")


def normalize_line(line: str) -> List[str]:
    """
    Split a line into case-folded word forms without any filtering.

    Args:
        line: A single line of text

    Returns:
        Word forms in their original order
    """
    words = []
    for match in _WORD_PATTERN.finditer(line.lower()):
        word = match.group(0).strip("'")
        if word:
            words.append(word)
    return words


class TokenStream:
    """
    Lazy, restartable sequence of tokens for a fixed set of lines.

    Every call to iter() tokenizes the lines again, so the stream can be
    consumed any number of times.
    """

    def __init__(self, tokenizer: 'Tokenizer', lines: Iterable[str]):
        self._tokenizer = tokenizer
        self._lines = tuple(lines)

    def __iter__(self) -> Iterator[str]:
        for line in self._lines:
            yield from self._tokenizer.tokenize_line(line)

    def __repr__(self) -> str:
        return f"TokenStream(lines={len(self._lines)})"


class Tokenizer:
    """
    Produces the unigram and bigram token streams used downstream.

    The stopword set is injected once and shared by reference; it is
    never modified.
    """

    def __init__(self, stopwords: Optional[AbstractSet[str]] = None):
        """
        Initialize the tokenizer.

        Args:
            stopwords: Words to drop from the unigram stream (case-folded).
                       Defaults to no stopwords.
        """
        self.stopwords: AbstractSet[str] = frozenset(stopwords or ())

    def keep(self, word: str) -> bool:
        """Return True if a normalized word belongs in the unigram stream."""
        return _ENDS_IN_LETTER.search(word) is not None and word not in self.stopwords

    def tokenize_line(self, line: str) -> Iterator[str]:
        """Yield the retained tokens of one line."""
        for word in normalize_line(line):
            if self.keep(word):
                yield word

    def tokenize(self, lines: Iterable[str]) -> TokenStream:
        """
        Tokenize body lines.

        Args:
            lines: Cleaned body lines

        Returns:
            A restartable stream of tokens in document order
        """
        return TokenStream(self, lines)

    def bigrams(self, lines: Iterable[str]) -> Iterator[Tuple[str, str]]:
        """
        Yield adjacent word pairs within each line.

        Stopwords are not removed, so pairs such as ('not', 'good') are
        preserved. Pairs never span two lines.
        """
        for line in lines:
            words = normalize_line(line)
            yield from zip(words, words[1:])

    def __repr__(self) -> str:
        return f"Tokenizer(stopwords={len(self.stopwords)})"
