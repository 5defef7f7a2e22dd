"""
DuckDB implementation of the PhraseStore.
"""

import duckdb
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ..exceptions import StoreReadError, StoreWriteError
from ..models import Phrase
from . import db_utils
from .connection import ConnectionHandler
from .schema_manager import SchemaManager
from .store import PhraseStore

logger = logging.getLogger(__name__)


def _rows_to_dicts(cursor: duckdb.DuckDBPyConnection) -> List[Dict[str, Any]]:
    """Convert cursor results to list of dictionaries using column names."""
    rows = cursor.fetchall()
    if not rows or cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    return [dict(zip(columns, row, strict=True)) for row in rows]


class DuckDBPhraseStore(PhraseStore):
    """
    Keeps the phrase collection in a DuckDB `phrases` table.

    Every save replaces the table contents in one transaction and bumps the
    `revision` counter in `store_meta`, which `poll_changes()` compares to
    detect writes made through another connection.
    """

    _INSERT_PHRASE_SQL = """
        INSERT INTO phrases (position, id, text, translation, created_at,
                             success_count, failure_count)
        VALUES ($1, $2, $3, $4, $5, $6, $7);
    """

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        super().__init__()
        self._handler = ConnectionHandler(db_path=db_path, read_only=read_only)
        self._schema_manager = SchemaManager(self._handler)
        logger.info(
            f"DuckDBPhraseStore initialized for DB at: {self._handler.db_path_resolved}"
        )

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    def _connection(self) -> duckdb.DuckDBPyConnection:
        conn = self._handler.get_connection()
        self._schema_manager.ensure_schema()
        return conn

    def close(self) -> None:
        self._handler.close_connection()

    def _read(self) -> List[Phrase]:
        conn = self._connection()
        try:
            cursor = conn.execute("SELECT * FROM phrases ORDER BY position;")
            rows = _rows_to_dicts(cursor)
        except duckdb.Error as e:
            raise StoreReadError(
                f"Failed to read phrases: {e}", original_exception=e
            ) from e
        return [db_utils.db_row_to_phrase(row) for row in rows]

    def _write(self, phrases: Sequence[Phrase]) -> None:
        params = db_utils.phrases_to_db_params_list(phrases)
        conn = self._connection()
        try:
            conn.begin()
            conn.execute("DELETE FROM phrases;")
            if params:
                conn.executemany(self._INSERT_PHRASE_SQL, params)
            conn.execute(
                "UPDATE store_meta SET value = value + 1 WHERE key = 'revision';"
            )
            conn.commit()
        except duckdb.Error as e:
            logger.error(f"Error writing {len(params)} phrases: {e}")
            try:
                conn.rollback()
                logger.info("Transaction rolled back after failed phrase write.")
            except duckdb.Error as rb_err:
                logger.error(f"Failed to rollback transaction: {rb_err}")
            raise StoreWriteError(
                f"Failed to write phrases: {e}", original_exception=e
            ) from e

    def _revision(self) -> Optional[int]:
        conn = self._connection()
        try:
            row = conn.execute(
                "SELECT value FROM store_meta WHERE key = 'revision';"
            ).fetchone()
        except duckdb.Error as e:
            raise StoreReadError(
                f"Failed to read store revision: {e}", original_exception=e
            ) from e
        return row[0] if row else None
