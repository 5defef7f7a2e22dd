import duckdb
import logging
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StoreConnectionError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


class ConnectionHandler:
    """Owns the lifecycle of the DuckDB connection behind a phrase store."""

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        """
        Parameters:
            db_path (Union[str, Path]): DuckDB file path, or ":memory:"
                (case-insensitive) for a transient in-memory database.
            read_only (bool): Open the database in read-only mode.
        """
        if isinstance(db_path, str) and db_path.lower() == MEMORY_PATH:
            self.db_path_resolved = Path(MEMORY_PATH)
            logger.info("Using in-memory DuckDB phrase store.")
        else:
            self.db_path_resolved = Path(db_path).expanduser().resolve()
            logger.info(f"ConnectionHandler targets {self.db_path_resolved}")

        self.read_only: bool = read_only
        self._connection: Optional[duckdb.DuckDBPyConnection] = None

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == MEMORY_PATH

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Return the open connection, connecting first if needed. The parent
        directory of a file-based database is created on demand.

        Raises:
            StoreConnectionError: If DuckDB cannot open the database.
        """
        if self._connection is None:
            try:
                if not self.is_memory:
                    self.db_path_resolved.parent.mkdir(
                        parents=True, exist_ok=True
                    )
                self._connection = duckdb.connect(
                    database=str(self.db_path_resolved),
                    read_only=self.read_only,
                )
                logger.info("Connected to the phrase database.")
            except (duckdb.Error, OSError) as e:
                raise StoreConnectionError(
                    f"Failed to connect to {self.db_path_resolved}: {e}",
                    original_exception=e,
                ) from e
        return self._connection

    def close_connection(self) -> None:
        """Close the connection if open; a later call reconnects."""
        if self._connection:
            try:
                self._connection.close()
                logger.info(f"Connection to {self.db_path_resolved} closed.")
            except duckdb.Error as e:
                logger.error(f"Error closing the database connection: {e}")
            finally:
                self._connection = None
