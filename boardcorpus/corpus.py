"""
Corpus: Main entry point for managing the collection of messages.

Handles loading, denylist exclusion, group subsetting and summary
statistics of the whole corpus.
"""

import logging
from collections import Counter
from typing import AbstractSet, Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import numpy as np
from tqdm import autonotebook

from .cleaning import MessageCleaner
from .config import BINARY_MESSAGE_DENYLIST
from .document import Document
from .reader import CorpusReader
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class Corpus:
    """
    Manages the collection of board messages.

    Every document added to the corpus shares the same cleaner and
    tokenizer instances.
    """

    def __init__(
        self,
        cleaner: Optional[MessageCleaner] = None,
        tokenizer: Optional[Tokenizer] = None,
        denylist: AbstractSet[str] = BINARY_MESSAGE_DENYLIST
    ):
        """
        Initialize the corpus.

        Args:
            cleaner: Message cleaner (defaults to all standard line filters)
            tokenizer: Tokenizer (defaults to no stopwords)
            denylist: Message ids excluded at load time
        """
        self.documents: Dict[str, Document] = {}
        self.denylist = frozenset(str(m) for m in denylist)

        self._cleaner = cleaner or MessageCleaner()
        self._tokenizer = tokenizer or Tokenizer()

    @property
    def cleaner(self) -> MessageCleaner:
        return self._cleaner

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    def add(self, document: Document) -> bool:
        """
        Add a document to the corpus.

        Args:
            document: Document to add

        Returns:
            False if the document is denylisted and was skipped
        """
        if document.message_id in self.denylist:
            logger.debug("Skipping denylisted message %s", document.doc_id)
            return False

        if document.doc_id in self.documents:
            raise ValueError(f"Duplicate document id: {document.doc_id}")

        document.set_cleaner(self._cleaner)
        document.set_tokenizer(self._tokenizer)
        self.documents[document.doc_id] = document
        return True

    def load(
        self,
        source: Union[CorpusReader, Iterable[Mapping[str, Any]]],
        groups: Optional[List[str]] = None,
        max_documents: Optional[int] = None,
        show_progress: bool = False
    ):
        """
        Load documents from a CorpusReader or any iterable of records.

        Args:
            source: CorpusReader, or records with group_id, message_id
                    and lines (or text)
            groups: Optional list of group ids to load
            max_documents: Maximum number of documents to load
            show_progress: Whether to show a progress bar
        """
        if isinstance(source, CorpusReader):
            total = source.count_messages(groups) if show_progress else None
            records = source.stream_messages(groups)
        else:
            total = None
            records = (r for r in source if not groups or r['group_id'] in groups)

        if max_documents and total:
            total = min(total, max_documents)
        if show_progress:
            records = autonotebook.tqdm(records, total=total, desc="Loading messages")

        loaded_count = 0
        skipped_count = 0

        for record in records:
            if max_documents and loaded_count >= max_documents:
                break

            lines = record.get('lines')
            if lines is None:
                lines = (record.get('text') or '').splitlines()

            metadata = {k: v for k, v in record.items()
                        if k not in ('group_id', 'message_id', 'lines', 'text')}
            doc = Document(
                group_id=record['group_id'],
                message_id=record['message_id'],
                lines=lines,
                metadata=metadata
            )

            if self.add(doc):
                loaded_count += 1
            else:
                skipped_count += 1

        logger.info("Loaded %d documents (%d denylisted)", loaded_count, skipped_count)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]], **kwargs) -> 'Corpus':
        """Create a corpus from in-memory records."""
        corpus = cls(**kwargs)
        corpus.load(records)
        return corpus

    @property
    def group_ids(self) -> List[str]:
        """Sorted ids of the groups present in the corpus."""
        return sorted({doc.group_id for doc in self.documents.values()})

    def get_documents_by_group(self, group_id: str) -> List[Document]:
        """Get all documents posted to a group."""
        return [doc for doc in self.documents.values() if doc.group_id == group_id]

    def _subset(self, documents: Iterable[Document]) -> 'Corpus':
        new_corpus = Corpus(
            cleaner=self._cleaner,
            tokenizer=self._tokenizer,
            denylist=self.denylist
        )
        for doc in documents:
            new_corpus.documents[doc.doc_id] = doc
        return new_corpus

    def filter_by_groups(self, groups: Iterable[str]) -> 'Corpus':
        """
        Create a new corpus containing only documents from some groups.

        Args:
            groups: Group ids to include

        Returns:
            New Corpus instance sharing the same documents
        """
        wanted = set(groups)
        return self._subset(d for d in self.documents.values() if d.group_id in wanted)

    def filter_by_prefix(self, prefix: str) -> 'Corpus':
        """Create a new corpus with the groups whose id starts with `prefix` (e.g. 'sci.')."""
        return self._subset(d for d in self.documents.values() if d.group_id.startswith(prefix))

    def exclude_messages(self, message_ids: AbstractSet[str]) -> 'Corpus':
        """
        Create a new corpus without the given message ids.

        The excluded ids are added to the new corpus's denylist, so later
        loads skip them as well.
        """
        excluded = frozenset(str(m) for m in message_ids)
        new_corpus = self._subset(
            d for d in self.documents.values() if d.message_id not in excluded)
        new_corpus.denylist = self.denylist | excluded
        return new_corpus

    def get_statistics(self) -> Dict[str, Any]:
        """
        Compute summary statistics about the corpus.

        Returns:
            Dictionary with document, body and token statistics
        """
        stats: Dict[str, Any] = {
            'total_documents': len(self.documents),
            'groups': len(self.group_ids),
            'documents_per_group': dict(sorted(
                Counter(doc.group_id for doc in self.documents.values()).items())),
        }

        body_lengths = [len(doc.body()) for doc in self.documents.values()]
        token_counts = [len(doc.tokens()) for doc in self.documents.values()]
        stats['empty_bodies'] = sum(1 for n in body_lengths if n == 0)
        stats['total_tokens'] = int(sum(token_counts))

        if token_counts:
            stats['tokens_per_document'] = {
                'mean': float(np.mean(token_counts)),
                'median': float(np.median(token_counts)),
                'min': int(np.min(token_counts)),
                'max': int(np.max(token_counts)),
            }

        return stats

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents.values())

    def __len__(self) -> int:
        """Return the number of documents in the corpus."""
        return len(self.documents)

    def __repr__(self) -> str:
        return f"Corpus(documents={len(self.documents)}, groups={len(self.group_ids)})"
