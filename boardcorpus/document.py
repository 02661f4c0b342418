"""
Document: Central data structure representing a single board message.

Holds the raw lines exactly as loaded and exposes the cleaned body and
token views, computed lazily and cached. The raw lines are never edited.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

DOC_ID_SEPARATOR = '_'
"""Joins group and message ids in doc_id; never part of a group id"""


class Document:
    """
    Represents a single message posted to a board (group).

    The cleaner and tokenizer are attached by the Corpus; derived views
    are cached per document.
    """

    def __init__(
        self,
        group_id: str,
        message_id: str,
        lines: Iterable[str],
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a document.

        Args:
            group_id: Board the message was posted to (e.g. "sci.space")
            message_id: Identifier of the message within the corpus
            lines: Raw lines of the message, header included
            metadata: Additional data (source path, etc.)

        Raises:
            ValueError: if the group id contains the doc id separator
        """
        self.group_id = str(group_id)
        if DOC_ID_SEPARATOR in self.group_id:
            raise ValueError(
                f"Group id {self.group_id!r} may not contain {DOC_ID_SEPARATOR!r}")
        self.message_id = str(message_id)
        self.lines: Tuple[str, ...] = tuple(lines)
        self.metadata = metadata or {}

        self._cache: Dict[str, Any] = {}

        # Set by Corpus
        self._cleaner = None
        self._tokenizer = None

    @property
    def doc_id(self) -> str:
        """Document id used in document-level tables."""
        return f"{self.group_id}{DOC_ID_SEPARATOR}{self.message_id}"

    def set_cleaner(self, cleaner):
        """Set the message cleaner for this document."""
        self._cleaner = cleaner
        self._cache.clear()

    def set_tokenizer(self, tokenizer):
        """Set the tokenizer for this document."""
        self._tokenizer = tokenizer
        self._cache.clear()

    def body(self) -> List[str]:
        """
        Get the cleaned body lines.

        Returns:
            Body lines after header, signature and quote removal
        """
        if 'body' in self._cache:
            return self._cache['body']

        if self._cleaner is None:
            raise RuntimeError("Message cleaner not set for this document")

        body = self._cleaner.clean(self.lines)
        self._cache['body'] = body
        return body

    def tokens(self) -> List[str]:
        """
        Get the unigram tokens of the body, in order.

        Returns:
            List of normalized, stopword-filtered tokens
        """
        if 'tokens' in self._cache:
            return self._cache['tokens']

        if self._tokenizer is None:
            raise RuntimeError("Tokenizer not set for this document")

        tokens = list(self._tokenizer.tokenize(self.body()))
        self._cache['tokens'] = tokens
        return tokens

    def bigrams(self) -> List[Tuple[str, str]]:
        """Get adjacent word pairs of the body, stopwords included."""
        if 'bigrams' in self._cache:
            return self._cache['bigrams']

        if self._tokenizer is None:
            raise RuntimeError("Tokenizer not set for this document")

        pairs = list(self._tokenizer.bigrams(self.body()))
        self._cache['bigrams'] = pairs
        return pairs

    def clear_cache(self):
        """Clear all cached derived views."""
        self._cache.clear()

    def __repr__(self) -> str:
        return f"Document(group={self.group_id}, id={self.message_id}, lines={len(self.lines)})"

    def __len__(self) -> int:
        """Return the number of raw lines."""
        return len(self.lines)
