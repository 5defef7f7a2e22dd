import duckdb
import logging

from ..exceptions import SchemaInitializationError
from . import schema
from .connection import ConnectionHandler

logger = logging.getLogger(__name__)


class SchemaManager:
    """Creates the phrase store tables when they do not exist yet."""

    def __init__(self, handler: ConnectionHandler):
        self._handler = handler
        self._initialized = False

    def ensure_schema(self) -> None:
        """
        Create the schema inside a transaction, once per manager. Skipped for
        read-only file databases, which must already carry the schema.

        Raises:
            SchemaInitializationError: If the DDL fails.
        """
        if self._initialized:
            return
        if self._handler.read_only and not self._handler.is_memory:
            logger.debug("Read-only phrase database; skipping schema setup.")
            self._initialized = True
            return

        conn = self._handler.get_connection()
        with conn.cursor() as cursor:
            try:
                cursor.begin()
                cursor.execute(schema.DB_SCHEMA_SQL)
                cursor.commit()
            except duckdb.Error as e:
                logger.error(
                    f"Error initializing schema at "
                    f"{self._handler.db_path_resolved}: {e}"
                )
                try:
                    cursor.rollback()
                except duckdb.Error as rb_err:
                    logger.error(f"Failed to rollback transaction: {rb_err}")
                raise SchemaInitializationError(
                    f"Failed to initialize schema: {e}", original_exception=e
                ) from e
        self._initialized = True
        logger.info(
            f"Phrase schema at {self._handler.db_path_resolved} is ready."
        )
