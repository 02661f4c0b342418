"""
Exceptions raised by the analysis components.

Malformed documents and lexicon misses are not errors; they are recovered
locally (empty body, zero contribution) and never reach the caller.
"""


class BoardCorpusError(Exception):
    """Base class for all package errors."""


class EmptyVocabularyError(BoardCorpusError, ValueError):
    """Raised when no words are left to model after frequency filtering."""


class InvalidTopicCountError(BoardCorpusError, ValueError):
    """Raised when the requested number of topics cannot be fitted."""


class LexiconFormatError(BoardCorpusError, ValueError):
    """Raised when a sentiment lexicon file cannot be parsed."""


class InvalidPriorError(BoardCorpusError, ValueError):
    """Raised when a Dirichlet prior is outside the range the backend accepts."""
