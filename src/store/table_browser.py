"""Table browsing and row editing for ingestion stores.

This module backs the list/view/edit/delete surface of a domain store.
Every table, key and column name is validated before it reaches SQL;
row ids and new values are always bound parameters.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.constants import IDENTITY_COLUMN
from core.errors import MissingParameterError, NotFoundError
from core.identifiers import quote_identifier, require_identifier
from core.logging_config import get_logger
from core.types import Domain, RowChange, TableInfo
from store.sqlite_store import SqliteStore

_LOGGER = get_logger(__name__)


class TableBrowser:
    """Read and edit access to the tables of one domain store."""

    def __init__(self, store: SqliteStore, domain: Domain) -> None:
        self._store = store
        self._domain = domain

    def list_tables(self, include_hidden: bool = True) -> tuple[str, ...]:
        """List user tables of the store.

        Args:
            include_hidden: When False, omit the domain's internal tables.

        Returns:
            Table names in creation order.
        """
        tables = self._store.list_tables()
        if include_hidden:
            return tables
        return tuple(table for table in tables if table not in self._domain.hidden_tables)

    def fetch_rows(self, table: str) -> list[dict[str, Any]]:
        """Return every row of a table.

        Raises:
            InvalidIdentifierError: If the table name fails validation.
            StorageError: If the table does not exist or cannot be read.
        """
        table_name = require_identifier(table)
        return self._store.fetch_all(f"SELECT * FROM {quote_identifier(table_name)}")

    def describe_table(self, table: str) -> TableInfo:
        return describe_table(self._store, table)

    def update_row(
        self,
        table: str,
        pk_column: str,
        row_id: Any,
        updated_data: Mapping[str, Any],
    ) -> RowChange:
        """Update a subset of columns of one row by primary key.

        Args:
            table: Table name.
            pk_column: Column identifying the row.
            row_id: Key value of the row to update.
            updated_data: New values keyed by column name.

        Returns:
            Number of rows changed; zero when no row has that key.

        Raises:
            MissingParameterError: If any argument is absent or empty.
            InvalidIdentifierError: If the table, key or a column name fails validation.
            NotFoundError: If the table does not exist.
        """
        _require_present(table=table, pk_column=pk_column, row_id=row_id)
        if not updated_data:
            raise MissingParameterError("Missing required parameter 'updated_data'.")
        table_name = require_identifier(table)
        key_column = require_identifier(pk_column, "column")
        columns = [require_identifier(column, "column") for column in updated_data]
        self._require_table(table_name)
        params = {f"v{index}": value for index, value in enumerate(updated_data.values())}
        params["row_id"] = row_id
        assignments = ", ".join(
            f"{quote_identifier(column)} = :v{index}" for index, column in enumerate(columns)
        )
        changes = self._store.execute(
            f"UPDATE {quote_identifier(table_name)} SET {assignments} "
            f"WHERE {quote_identifier(key_column)} = :row_id",
            params,
        )
        _LOGGER.info("row_updated", store=self._store.name, table=table_name, changes=changes)
        return RowChange(changes=changes, message=f"Updated {changes} row(s)")

    def delete_row(self, table: str, row_id: Any, pk_column: str | None = None) -> RowChange:
        """Delete one row by primary key.

        Args:
            table: Table name.
            row_id: Key value of the row to delete.
            pk_column: Key column; defaults to the table's declared primary key.

        Returns:
            Number of rows deleted.

        Raises:
            MissingParameterError: If the table or row id is absent.
            InvalidIdentifierError: If the table or key name fails validation.
            NotFoundError: If the table does not exist.
        """
        _require_present(table=table, row_id=row_id)
        table_name = require_identifier(table)
        if pk_column is None:
            key_column = describe_table(self._store, table_name).primary_key
        else:
            key_column = require_identifier(pk_column, "column")
            self._require_table(table_name)
        changes = self._store.execute(
            f"DELETE FROM {quote_identifier(table_name)} "
            f"WHERE {quote_identifier(key_column)} = :row_id",
            {"row_id": row_id},
        )
        _LOGGER.info("row_deleted", store=self._store.name, table=table_name, changes=changes)
        return RowChange(changes=changes, message=f"Deleted {changes} row(s)")

    def drop_table(self, table: str) -> None:
        """Drop a table; a missing table is a no-op."""
        table_name = require_identifier(table)
        self._store.execute(f"DROP TABLE IF EXISTS {quote_identifier(table_name)}")
        self._store.schema.forget(table_name)
        _LOGGER.info("table_dropped", store=self._store.name, table=table_name)

    def _require_table(self, table: str) -> None:
        if not self._store.table_exists(table):
            raise NotFoundError(f'Table "{table}" does not exist in the {self._store.name} store.')


def describe_table(store: SqliteStore, table: str) -> TableInfo:
    """Return declared column metadata and the primary key of a table.

    Args:
        store: Open store holding the table.
        table: Table name.

    Returns:
        Column metadata; the primary key falls back to ``id``.

    Raises:
        InvalidIdentifierError: If the table name fails validation.
        NotFoundError: If the table does not exist.
    """
    table_name = require_identifier(table)
    columns = store.column_info(table_name)
    if not columns:
        raise NotFoundError(f'Table "{table_name}" does not exist in the {store.name} store.')
    primary_key = next((column.name for column in columns if column.pk), IDENTITY_COLUMN)
    return TableInfo(columns=columns, primary_key=primary_key)


def _require_present(**arguments: Any) -> None:
    for argument_name, value in arguments.items():
        if value is None or value == "":
            raise MissingParameterError(f"Missing required parameter '{argument_name}'.")
