"""Keyed allotment document store.

Each allotment is saved under its own table-shaped name and holds exactly
one row: the JSON-encoded headers and rows plus the caller's timestamp.
Saving again replaces the previous document.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text

from core.constants import (
    ALLOTMENT_HEADER_COLUMN,
    ALLOTMENT_ROW_COLUMN,
    ALLOTMENT_SAVED_AT_COLUMN,
    CREATED_AT_COLUMN,
    IDENTITY_COLUMN,
)
from core.errors import CorruptDocumentError, NotFoundError, StorageError
from core.identifiers import quote_identifier, require_identifier
from core.logging_config import get_logger
from core.types import AllotmentDocument, StoredAllotment, TableInfo
from store.sqlite_store import SqliteStore
from store.table_browser import describe_table

_LOGGER = get_logger(__name__)


class AllotmentStore:
    """Full-replace JSON document store over one SQLite file."""

    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    def put(self, name: str, document: AllotmentDocument) -> None:
        """Replace the document saved under a name.

        Args:
            name: Table-shaped document name.
            document: Document to persist.

        Raises:
            InvalidIdentifierError: If the name fails identifier validation.
            StorageError: If the document cannot be encoded or written.
        """
        table = require_identifier(name)
        header_blob = _encode(table, document.headers)
        row_blob = _encode(table, document.rows)
        table_sql = quote_identifier(table)
        with self._store.transaction() as connection:
            connection.execute(text(_create_table_sql(table_sql)))
            connection.execute(text(f"DELETE FROM {table_sql}"))
            connection.execute(
                text(
                    f"INSERT INTO {table_sql} "
                    f"({ALLOTMENT_SAVED_AT_COLUMN}, {ALLOTMENT_HEADER_COLUMN}, "
                    f"{ALLOTMENT_ROW_COLUMN}) VALUES (:saved_at, :headers, :rows)"
                ),
                {"saved_at": document.saved_at, "headers": header_blob, "rows": row_blob},
            )
        self._store.schema.forget(table)
        _LOGGER.info("allotment_saved", name=table, saved_at=document.saved_at)

    def get(self, name: str) -> StoredAllotment | None:
        """Load the document saved under a name.

        Args:
            name: Table-shaped document name.

        Returns:
            The stored document, or None when nothing is saved under the name.

        Raises:
            InvalidIdentifierError: If the name fails identifier validation.
            CorruptDocumentError: If a stored JSON blob cannot be decoded.
        """
        table = require_identifier(name)
        if not self._store.table_exists(table):
            return None
        rows = self._store.fetch_all(
            f"SELECT * FROM {quote_identifier(table)} ORDER BY {IDENTITY_COLUMN} DESC LIMIT 1"
        )
        if not rows:
            return None
        return _stored_allotment(table, rows[0])

    def list(self) -> tuple[str, ...]:
        return self._store.list_tables()

    def exists(self, name: str) -> bool:
        table = require_identifier(name)
        return self._store.table_exists(table)

    def delete(self, name: str) -> None:
        """Drop the table holding a document; missing names are a no-op."""
        table = require_identifier(name)
        self._store.execute(f"DROP TABLE IF EXISTS {quote_identifier(table)}")
        self._store.schema.forget(table)
        _LOGGER.info("table_dropped", store=self._store.name, table=table)

    def describe(self, name: str) -> TableInfo:
        """Return column metadata of a document table.

        Raises:
            InvalidIdentifierError: If the name fails identifier validation.
            NotFoundError: If nothing is saved under the name.
        """
        return describe_table(self._store, name)


def _create_table_sql(table_sql: str) -> str:
    return (
        f"CREATE TABLE IF NOT EXISTS {table_sql} ("
        f"{IDENTITY_COLUMN} INTEGER PRIMARY KEY AUTOINCREMENT, "
        f"{ALLOTMENT_SAVED_AT_COLUMN} TEXT, "
        f"{ALLOTMENT_HEADER_COLUMN} TEXT, "
        f"{ALLOTMENT_ROW_COLUMN} TEXT, "
        f"{CREATED_AT_COLUMN} TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )


def _encode(table: str, value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as error:
        raise StorageError(
            f"Failed to encode allotment '{table}': {error}. "
            "Headers and rows must be JSON-serializable."
        ) from error


def _decode(table: str, column: str, blob: Any) -> Any:
    if blob is None or blob == "":
        return []
    try:
        return json.loads(blob)
    except (TypeError, json.JSONDecodeError) as error:
        raise CorruptDocumentError(
            f"Failed to decode {column} of allotment '{table}': {error}. "
            "Save the allotment again to replace the corrupt document."
        ) from error


def _stored_allotment(table: str, row: dict[str, Any]) -> StoredAllotment:
    missing_columns = {
        ALLOTMENT_SAVED_AT_COLUMN,
        ALLOTMENT_HEADER_COLUMN,
        ALLOTMENT_ROW_COLUMN,
    } - set(row)
    if missing_columns:
        raise NotFoundError(
            f"Table '{table}' is not an allotment document: "
            f"missing columns {', '.join(sorted(missing_columns))}."
        )
    document = AllotmentDocument(
        saved_at=row[ALLOTMENT_SAVED_AT_COLUMN],
        headers=_decode(table, ALLOTMENT_HEADER_COLUMN, row[ALLOTMENT_HEADER_COLUMN]),
        rows=_decode(table, ALLOTMENT_ROW_COLUMN, row[ALLOTMENT_ROW_COLUMN]),
    )
    created_at = row.get(CREATED_AT_COLUMN)
    return StoredAllotment(
        row_id=int(row[IDENTITY_COLUMN]),
        document=document,
        created_at=str(created_at) if created_at is not None else None,
    )
