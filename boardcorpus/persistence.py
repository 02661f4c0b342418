"""
PersistenceManager: Saves and loads the analysis output tables.

Tables are written with Polars (Parquet or CSV), sparse matrices as NPZ
and topic model run status as JSON.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import polars as pl
from scipy.sparse import csr_matrix, load_npz, save_npz

from .topic_model import TopicModelResult

logger = logging.getLogger(__name__)

FORMATS = ('parquet', 'csv')


class PersistenceManager:
    """
    Manages storage and retrieval of analysis artifacts.

    Layout under the base path:
    - tables/   one file per output table
    - matrices/ sparse document x word matrices
    - topics/   topic model tables and run status
    """

    def __init__(self, base_path: str, format: str = 'parquet'):
        """
        Initialize persistence manager.

        Args:
            base_path: Root directory for artifacts
            format: Table format, 'parquet' or 'csv'
        """
        if format not in FORMATS:
            raise ValueError(f"Unknown table format: {format}")

        self.base_path = Path(base_path)
        self.format = format

        self.tables_dir = self.base_path / 'tables'
        self.matrices_dir = self.base_path / 'matrices'
        self.topics_dir = self.base_path / 'topics'

        for dir_path in [self.tables_dir, self.matrices_dir, self.topics_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

    def _table_path(self, directory: Path, name: str) -> Path:
        return directory / f"{name}.{self.format}"

    def _write(self, table: pl.DataFrame, path: Path):
        if self.format == 'parquet':
            table.write_parquet(path)
        else:
            table.write_csv(path)

    def _read(self, path: Path) -> pl.DataFrame:
        if self.format == 'parquet':
            return pl.read_parquet(path)
        return pl.read_csv(path)

    def save_table(self, table: pl.DataFrame, name: str) -> Path:
        """
        Save an output table (e.g. 'term_counts', 'tf_idf').

        Args:
            table: Table to save
            name: Artifact name, used as the file stem

        Returns:
            Path of the written file
        """
        output_path = self._table_path(self.tables_dir, name)
        self._write(table, output_path)
        logger.info("Saved table %s (%d rows) to %s", name, table.height, output_path)
        return output_path

    def load_table(self, name: str) -> pl.DataFrame:
        """Load a table saved with save_table()."""
        file_path = self._table_path(self.tables_dir, name)
        if not file_path.exists():
            raise FileNotFoundError(f"No saved table named '{name}' in {self.tables_dir}")
        return self._read(file_path)

    def save_tables(self, tables: Dict[str, pl.DataFrame]) -> List[Path]:
        """Save several named tables."""
        return [self.save_table(table, name) for name, table in tables.items()]

    def save_sparse_matrix(
        self,
        matrix: csr_matrix,
        document_ids: List[str],
        vocabulary: List[str],
        name: str = 'document_term'
    ):
        """
        Save a sparse matrix with its row and column labels.

        Args:
            matrix: Sparse document x word matrix
            document_ids: Row labels
            vocabulary: Column labels
            name: Artifact name
        """
        save_npz(self.matrices_dir / f"{name}.npz", matrix)
        with open(self.matrices_dir / f"{name}_labels.json", 'w', encoding='utf-8') as f:
            json.dump({'document_ids': document_ids, 'vocabulary': vocabulary}, f)
        logger.info("Saved sparse matrix %s %s", name, matrix.shape)

    def load_sparse_matrix(self, name: str = 'document_term') -> Tuple[csr_matrix, List[str], List[str]]:
        """Load a sparse matrix and its labels."""
        matrix = load_npz(self.matrices_dir / f"{name}.npz").tocsr()
        with open(self.matrices_dir / f"{name}_labels.json", 'r', encoding='utf-8') as f:
            labels = json.load(f)
        return matrix, labels['document_ids'], labels['vocabulary']

    def save_topic_model(self, result: TopicModelResult, name: str = 'lda'):
        """
        Save beta, gamma and the run status of a topic model fit.

        Args:
            result: Fitted topic model
            name: Prefix for the written files
        """
        self._write(result.beta, self._table_path(self.topics_dir, f"{name}_beta"))
        self._write(result.gamma, self._table_path(self.topics_dir, f"{name}_gamma"))

        status = {
            'method': result.method,
            'converged': result.converged,
            'n_iter': result.n_iter,
            'stop_reason': result.stop_reason,
            'log_likelihood': result.log_likelihood,
        }
        with open(self.topics_dir / f"{name}_status.json", 'w', encoding='utf-8') as f:
            json.dump(status, f, indent=2)

        logger.info("Saved topic model %s (converged=%s)", name, result.converged)

    def load_topic_model(self, name: str = 'lda') -> TopicModelResult:
        """Load a topic model saved with save_topic_model()."""
        with open(self.topics_dir / f"{name}_status.json", 'r', encoding='utf-8') as f:
            status: Dict[str, Any] = json.load(f)

        return TopicModelResult(
            beta=self._read(self._table_path(self.topics_dir, f"{name}_beta")),
            gamma=self._read(self._table_path(self.topics_dir, f"{name}_gamma")),
            **status
        )
