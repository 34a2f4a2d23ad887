"""SQLite store handle.

This module wraps one durable SQLite file behind a SQLAlchemy engine.
It owns open/close, statement execution, schema introspection, and
translation of engine failures into ``StorageError``.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.constants import DEFAULT_BUSY_TIMEOUT_SECONDS, INTERNAL_TABLE_PREFIX
from core.errors import StorageError
from core.logging_config import get_logger
from core.types import ColumnInfo
from store.schema_evolution import TableSchemaRegistry

_LOGGER = get_logger(__name__)

_LIST_TABLES_SQL = (
    "SELECT name FROM sqlite_master WHERE type = 'table' "
    f"AND name NOT LIKE '{INTERNAL_TABLE_PREFIX}%'"
)
_TABLE_EXISTS_SQL = "SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"
_TABLE_INFO_SQL = (
    'SELECT name, type, "notnull", pk FROM pragma_table_info(:name) ORDER BY cid'
)


class SqliteStore:
    """One read-write-or-create SQLite store file.

    Statements run sequentially, each in its own short transaction unless
    the caller groups them with ``transaction``.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        busy_timeout_seconds: float = DEFAULT_BUSY_TIMEOUT_SECONDS,
        echo_sql: bool = False,
    ) -> None:
        """Create an unopened store handle.

        Args:
            name: Logical store name used in logs and errors.
            path: SQLite database file path.
            busy_timeout_seconds: Seconds to wait on a locked database.
            echo_sql: Whether the engine logs emitted SQL.
        """
        self.name = name
        self.path = path
        self._busy_timeout_seconds = busy_timeout_seconds
        self._echo_sql = echo_sql
        self._engine: Engine | None = None
        self.schema = TableSchemaRegistry(self.column_names)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> None:
        """Open the store file, creating it when missing.

        Raises:
            StorageError: If the file cannot be created or opened.
        """
        if self._engine is not None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise StorageError(
                f"Failed to open {self.name} store at {self.path}: {error}. "
                "Check that the data root is writable."
            ) from error
        engine = create_engine(
            f"sqlite:///{self.path}",
            echo=self._echo_sql,
            connect_args={"timeout": self._busy_timeout_seconds},
        )
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as error:
            engine.dispose()
            raise StorageError(
                f"Failed to open {self.name} store at {self.path}: {_engine_message(error)}"
            ) from error
        self._engine = engine
        self.schema.clear()
        _LOGGER.info("store_opened", store=self.name, path=str(self.path))

    def close(self) -> None:
        """Release every pooled connection of this store.

        Raises:
            StorageError: If the engine fails while closing connections.
        """
        if self._engine is None:
            return
        engine = self._engine
        self._engine = None
        self.schema.clear()
        try:
            engine.dispose()
        except SQLAlchemyError as error:
            raise StorageError(
                f"Failed to close {self.name} store: {_engine_message(error)}"
            ) from error
        _LOGGER.info("store_closed", store=self.name)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection whose statements commit together."""
        engine = self._require_engine()
        with _translated_errors():
            with engine.begin() as connection:
                yield connection

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> int:
        """Run one statement and return the affected row count."""
        with self.transaction() as connection:
            result = connection.execute(text(sql), dict(params or {}))
            return int(result.rowcount or 0)

    def fetch_all(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Run a query and return rows as plain dictionaries."""
        with self.transaction() as connection:
            result = connection.execute(text(sql), dict(params or {}))
            return [dict(row) for row in result.mappings().all()]

    def list_tables(self) -> tuple[str, ...]:
        """Return user table names in creation order."""
        rows = self.fetch_all(_LIST_TABLES_SQL)
        return tuple(str(row["name"]) for row in rows)

    def table_exists(self, table: str) -> bool:
        return bool(self.fetch_all(_TABLE_EXISTS_SQL, {"name": table}))

    def column_info(self, table: str) -> tuple[ColumnInfo, ...]:
        """Return declared column metadata, empty when the table is missing."""
        rows = self.fetch_all(_TABLE_INFO_SQL, {"name": table})
        return tuple(
            ColumnInfo(
                name=str(row["name"]),
                type=str(row["type"] or ""),
                notnull=int(row["notnull"]) == 1,
                pk=int(row["pk"]) >= 1,
            )
            for row in rows
        )

    def column_names(self, table: str) -> list[str]:
        return [column.name for column in self.column_info(table)]

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise StorageError(
                f"The {self.name} store is not open. Open the application context first."
            )
        return self._engine


@contextmanager
def _translated_errors() -> Iterator[None]:
    """Re-raise engine failures as ``StorageError`` with the engine message."""
    try:
        yield
    except SQLAlchemyError as error:
        raise StorageError(_engine_message(error)) from error


def _engine_message(error: SQLAlchemyError) -> str:
    original = getattr(error, "orig", None)
    if original is not None:
        return str(original)
    return str(error)
