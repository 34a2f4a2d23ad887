"""Append-only schema evolution for ingested tables.

This module keeps an explicit ordered column registry per table and grows
tables to cover the columns observed in incoming files. Columns are only
ever added as nullable text; existing columns are never touched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable

from core.constants import (
    CREATED_AT_COLUMN,
    IDENTITY_COLUMN,
    SOURCE_FILE_COLUMN,
    TEXT_COLUMN_TYPE,
)
from core.identifiers import quote_identifier
from core.logging_config import get_logger

if TYPE_CHECKING:
    from store.sqlite_store import SqliteStore

_LOGGER = get_logger(__name__)


class TableSchemaRegistry:
    """Ordered column names per table, loaded lazily from the store."""

    def __init__(self, load_columns: Callable[[str], list[str]]) -> None:
        self._load_columns = load_columns
        self._columns: dict[str, list[str]] = {}

    def columns(self, table: str) -> tuple[str, ...]:
        """Return the known columns of a table, empty when it does not exist."""
        if table not in self._columns:
            self._columns[table] = list(self._load_columns(table))
        return tuple(self._columns[table])

    def has_column(self, table: str, column: str) -> bool:
        """Return whether the table holds the column; SQLite names ignore case."""
        column_key = column.lower()
        return any(existing.lower() == column_key for existing in self.columns(table))

    def record_created(self, table: str, columns: Iterable[str]) -> None:
        self._columns[table] = list(columns)

    def record_added(self, table: str, column: str) -> None:
        self._columns.setdefault(table, []).append(column)

    def forget(self, table: str) -> None:
        self._columns.pop(table, None)

    def clear(self) -> None:
        self._columns.clear()


def unique_columns(columns: Iterable[str]) -> tuple[str, ...]:
    """Collapse repeated column names, keeping the first spelling.

    Args:
        columns: Sanitized column names in observed order.

    Returns:
        Ordered names with case-insensitive repeats removed.
    """
    seen_keys: set[str] = set()
    unique: list[str] = []
    for column in columns:
        column_key = column.lower()
        if column_key in seen_keys:
            continue
        seen_keys.add(column_key)
        unique.append(column)
    return tuple(unique)


def ensure_columns(
    store: "SqliteStore",
    table: str,
    desired_columns: Iterable[str],
) -> tuple[str, ...]:
    """Create the table or add whichever desired columns it lacks.

    Args:
        store: Open store holding the table.
        table: Sanitized table name.
        desired_columns: Sanitized column names in file order.

    Returns:
        Columns created or added by this call.

    Raises:
        StorageError: If the engine rejects the creation or alteration,
            for example when a header sanitizes to a reserved column name.
    """
    wanted = unique_columns(desired_columns)
    if not store.schema.columns(table):
        _create_table(store, table, wanted)
        return wanted
    missing = tuple(column for column in wanted if not store.schema.has_column(table, column))
    for column in missing:
        store.execute(
            f"ALTER TABLE {quote_identifier(table)} "
            f"ADD COLUMN {quote_identifier(column)} {TEXT_COLUMN_TYPE}"
        )
        store.schema.record_added(table, column)
    if missing:
        _LOGGER.info("columns_added", store=store.name, table=table, columns=list(missing))
    return missing


def ensure_merged_table(store: "SqliteStore", table: str) -> None:
    """Create a domain merged table with its fixed leading columns."""
    store.execute(
        f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} ("
        f"{IDENTITY_COLUMN} INTEGER PRIMARY KEY AUTOINCREMENT, "
        f"{SOURCE_FILE_COLUMN} {TEXT_COLUMN_TYPE}, "
        f"{CREATED_AT_COLUMN} TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )
    store.schema.forget(table)


def _create_table(store: "SqliteStore", table: str, columns: tuple[str, ...]) -> None:
    column_definitions = [
        f"{IDENTITY_COLUMN} INTEGER PRIMARY KEY AUTOINCREMENT",
        *(f"{quote_identifier(column)} {TEXT_COLUMN_TYPE}" for column in columns),
        f"{SOURCE_FILE_COLUMN} {TEXT_COLUMN_TYPE}",
    ]
    store.execute(
        f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} "
        f"({', '.join(column_definitions)})"
    )
    store.schema.record_created(table, (IDENTITY_COLUMN, *columns, SOURCE_FILE_COLUMN))
    _LOGGER.info("table_created", store=store.name, table=table, columns=list(columns))
