"""
CorpusReader: Handles loading of raw messages from the file system.

Supports a directory tree with one folder per board (the 20 Newsgroups
layout, `root/<group>/<message_id>`) and a flat CSV export with
`group_id`, `message_id` and `text` columns.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import polars as pl

from .config import READER_ENCODING

logger = logging.getLogger(__name__)


class CorpusReader:
    """
    Streams raw message records one at a time.

    Each record is a dictionary with `group_id`, `message_id`, `lines`
    (the message split into lines, newlines removed) and `source`.
    """

    def __init__(self, corpus_path: str, encoding: str = READER_ENCODING):
        """
        Initialize the corpus reader.

        Args:
            corpus_path: Root directory of the board folders, or a CSV file
            encoding: Encoding of the raw message files
        """
        self.corpus_path = Path(corpus_path)
        self.encoding = encoding
        self._detect_format()

    def _detect_format(self):
        """Detect whether data is a CSV export or a directory tree."""
        if self.corpus_path.is_file() and self.corpus_path.suffix == '.csv':
            self._format = 'csv'
            return

        if self.corpus_path.is_dir():
            csv_path = self.corpus_path / 'messages.csv'
            if csv_path.exists():
                self.corpus_path = csv_path
                self._format = 'csv'
                return
            if any(d.is_dir() for d in self.corpus_path.iterdir()):
                self._format = 'tree'
                return

        raise ValueError(f"No valid data found in {self.corpus_path}")

    def stream_messages(self, groups: Optional[List[str]] = None) -> Iterator[Dict[str, Any]]:
        """
        Generator that yields raw message records one by one.

        Args:
            groups: Optional list of group ids to restrict to

        Yields:
            Dictionary with group_id, message_id, lines and source
        """
        if self._format == 'csv':
            yield from self._stream_csv(groups)
        else:
            yield from self._stream_tree(groups)

    def _stream_tree(self, groups: Optional[List[str]] = None) -> Iterator[Dict[str, Any]]:
        """Stream messages from `root/<group>/<message_id>` files."""
        for group_dir in sorted(d for d in self.corpus_path.iterdir() if d.is_dir()):
            group_id = group_dir.name
            if groups and group_id not in groups:
                continue

            for message_file in sorted(p for p in group_dir.iterdir() if p.is_file()):
                with open(message_file, 'r', encoding=self.encoding) as f:
                    text = f.read()
                yield {
                    'group_id': group_id,
                    'message_id': message_file.name,
                    'lines': text.splitlines(),
                    'source': str(message_file),
                }

    def _stream_csv(self, groups: Optional[List[str]] = None) -> Iterator[Dict[str, Any]]:
        """Stream messages from a CSV export using Polars."""
        df = pl.read_csv(self.corpus_path, schema_overrides={
            'group_id': pl.Utf8, 'message_id': pl.Utf8, 'text': pl.Utf8})

        missing = {'group_id', 'message_id', 'text'} - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.corpus_path} is missing columns: {', '.join(sorted(missing))}")

        if groups:
            df = df.filter(pl.col('group_id').is_in(groups))

        for row in df.iter_rows(named=True):
            yield {
                'group_id': row['group_id'],
                'message_id': row['message_id'],
                'lines': (row['text'] or '').splitlines(),
                'source': str(self.corpus_path),
            }

    def get_all_group_ids(self) -> List[str]:
        """
        Returns the ids of all groups available in the raw data.

        Returns:
            Sorted list of group ids
        """
        if self._format == 'csv':
            df = pl.read_csv(self.corpus_path, columns=['group_id'],
                             schema_overrides={'group_id': pl.Utf8})
            return sorted(df['group_id'].unique().to_list())

        return sorted(d.name for d in self.corpus_path.iterdir() if d.is_dir())

    def count_messages(self, groups: Optional[List[str]] = None) -> int:
        """
        Count messages, optionally restricted to some groups.

        Args:
            groups: Optional list of group ids

        Returns:
            Total number of messages
        """
        if self._format == 'csv':
            df = pl.read_csv(self.corpus_path, columns=['group_id'],
                             schema_overrides={'group_id': pl.Utf8})
            if groups:
                df = df.filter(pl.col('group_id').is_in(groups))
            return len(df)

        count = 0
        for group_dir in self.corpus_path.iterdir():
            if group_dir.is_dir() and (not groups or group_dir.name in groups):
                count += sum(1 for p in group_dir.iterdir() if p.is_file())
        return count

    def __repr__(self) -> str:
        return f"CorpusReader(path={self.corpus_path}, format={self._format})"
