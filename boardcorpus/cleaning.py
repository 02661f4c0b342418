"""
MessageCleaner: Strips header, signature and quoted material from messages.

A message is consumed line by line through a three-state machine
(header -> body -> signature). Inside the body, an ordered list of line
filters drops quoting artifacts; each filter is a plain predicate that
returns True for lines that should be discarded.
"""

import enum
import re
from typing import Callable, Dict, Iterable, Iterator, List, Optional

LineFilter = Callable[[str], bool]

SIGNATURE_DELIMITER = '--'

_ALNUM_PATTERN = re.compile(r'[A-Za-z0-9]')
_ATTRIBUTION_PATTERN = re.compile(r'writes(:|\.\.\.)$')
_ARTICLE_REFERENCE_PREFIX = 'In article <'


class CleanerState(enum.Enum):
    """States of the per-message line filter."""

    HEADER = 'header'
    BODY = 'body'
    SIGNATURE = 'signature'


def is_blank(line: str) -> bool:
    """Return True for empty or whitespace-only lines."""
    return not line.strip()


def has_no_alphanumeric(line: str) -> bool:
    """Lines made only of quote markers or punctuation (e.g. '>>', '-----')."""
    return _ALNUM_PATTERN.search(line) is None


def is_quoted_text(line: str) -> bool:
    """Lines quoted from another message start with '>'."""
    return line.lstrip().startswith('>')


def is_attribution(line: str) -> bool:
    """Attribution lines such as 'joe@foo.com (Joe) writes:'."""
    return _ATTRIBUTION_PATTERN.search(line.rstrip()) is not None


def is_article_reference(line: str) -> bool:
    """Lines such as 'In article <1993Apr5.1234@host.edu>, ...'."""
    return line.startswith(_ARTICLE_REFERENCE_PREFIX)


def is_signature_delimiter(line: str) -> bool:
    return line.startswith(SIGNATURE_DELIMITER)


LINE_FILTER_REGISTRY: Dict[str, LineFilter] = {
    'no_alphanumeric': has_no_alphanumeric,
    'quoted_text': is_quoted_text,
    'attribution': is_attribution,
    'article_reference': is_article_reference,
}

DEFAULT_LINE_FILTERS: List[str] = [
    'no_alphanumeric',
    'quoted_text',
    'attribution',
    'article_reference',
]


class MessageCleaner:
    """
    Extracts the analyzable body from a message's raw lines.

    The cleaner never raises on malformed input: a message without a blank
    line separating the header from the body simply has an empty body.
    """

    def __init__(self, filters: Optional[List[str]] = None):
        """
        Initialize the cleaner.

        Args:
            filters: Names of line filters (from LINE_FILTER_REGISTRY) to
                     apply in order inside the body. If None, uses all
                     default filters.
        """
        if filters is None:
            filters = list(DEFAULT_LINE_FILTERS)

        self.filter_names: List[str] = []
        self.filters: List[LineFilter] = []
        for name in filters:
            self.add_filter(name)

    def add_filter(self, name: str, position: Optional[int] = None):
        """
        Add a line filter.

        Args:
            name: Name of the filter in LINE_FILTER_REGISTRY
            position: Position to insert (None = append to end)
        """
        if name not in LINE_FILTER_REGISTRY:
            raise ValueError(f"Unknown line filter: {name}")

        line_filter = LINE_FILTER_REGISTRY[name]
        if position is None:
            self.filters.append(line_filter)
            self.filter_names.append(name)
        else:
            self.filters.insert(position, line_filter)
            self.filter_names.insert(position, name)

    def remove_filter(self, name: str):
        """Remove a line filter if present."""
        if name in self.filter_names:
            idx = self.filter_names.index(name)
            del self.filters[idx]
            del self.filter_names[idx]

    def is_noise(self, line: str) -> bool:
        """Return True if any body filter rejects the line."""
        return any(line_filter(line) for line_filter in self.filters)

    def iter_clean(self, lines: Iterable[str]) -> Iterator[str]:
        """
        Stream the body lines of a message.

        Args:
            lines: Raw lines of the message, in order

        Yields:
            Body lines, in their original order (blank lines included)
        """
        state = CleanerState.HEADER

        for line in lines:
            if state is CleanerState.HEADER:
                if is_blank(line):
                    state = CleanerState.BODY
                    yield line
                continue

            if state is CleanerState.SIGNATURE:
                # Nothing after the delimiter is body text
                break

            if is_signature_delimiter(line):
                state = CleanerState.SIGNATURE
                continue

            if is_blank(line) or not self.is_noise(line):
                yield line

    def clean(self, lines: Iterable[str]) -> List[str]:
        """Return the body lines of a message as a list."""
        return list(self.iter_clean(lines))

    def __repr__(self) -> str:
        return f"MessageCleaner(filters={self.filter_names})"
