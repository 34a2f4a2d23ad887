"""Shared typed models.

This module defines immutable data models used by ingest, store,
dispatch and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from core.constants import (
    EXAM_HIDDEN_TABLES,
    EXAM_MERGED_TABLE,
    EXAM_STORE_NAME,
    GENERAL_MERGED_TABLE,
    GENERAL_STORE_NAME,
)


@dataclass(frozen=True)
class Domain:
    """Ingestion domain with its own store and merged table.

    Attributes:
        name: Domain identifier, also the name of its store.
        merged_table: Table receiving every row ingested in this domain.
        hidden_tables: Tables omitted from the user-facing table listing.
    """

    name: str
    merged_table: str
    hidden_tables: tuple[str, ...] = ()


GENERAL_DOMAIN = Domain(name=GENERAL_STORE_NAME, merged_table=GENERAL_MERGED_TABLE)
EXAM_DOMAIN = Domain(
    name=EXAM_STORE_NAME,
    merged_table=EXAM_MERGED_TABLE,
    hidden_tables=EXAM_HIDDEN_TABLES,
)
DOMAINS: Mapping[str, Domain] = {
    GENERAL_DOMAIN.name: GENERAL_DOMAIN,
    EXAM_DOMAIN.name: EXAM_DOMAIN,
}


@dataclass(frozen=True)
class ParsedFile:
    """One decoded CSV file ready for ingestion.

    Attributes:
        name: Raw file name, used as the per-file table name after sanitizing.
        headers: Ordered raw header names.
        rows: Rows keyed by raw header name.
    """

    name: str
    headers: tuple[str, ...]
    rows: tuple[Mapping[str, Any], ...] = ()


@dataclass(frozen=True)
class FileOutcome:
    """Per-file ingestion counts.

    Attributes:
        file_name: Raw file name from the batch.
        table_name: Sanitized per-file table name.
        rows_read: Rows present in the parsed file.
        rows_blank: Rows dropped because every value was blank.
        rows_inserted: Rows added to the per-file table.
        merged_rows_inserted: Rows added to the domain merged table.
    """

    file_name: str
    table_name: str
    rows_read: int
    rows_blank: int
    rows_inserted: int
    merged_rows_inserted: int


@dataclass(frozen=True)
class IngestReport:
    """Result of one ingestion batch.

    Attributes:
        success: Whether every file in the batch was processed.
        file_count: Number of files submitted.
        outcomes: Outcomes of files processed before any failure.
        error: Storage error message when the batch aborted.
    """

    success: bool
    file_count: int
    outcomes: tuple[FileOutcome, ...] = ()
    error: str | None = None

    @property
    def processed_file_count(self) -> int:
        """Number of files whose rows were fully written."""
        return len(self.outcomes)


@dataclass(frozen=True)
class ColumnInfo:
    """Declared metadata of one table column."""

    name: str
    type: str
    notnull: bool
    pk: bool


@dataclass(frozen=True)
class TableInfo:
    """Column metadata for a table plus its primary key column."""

    columns: tuple[ColumnInfo, ...]
    primary_key: str


@dataclass(frozen=True)
class RowChange:
    """Outcome of an update or delete by primary key."""

    changes: int
    message: str


@dataclass(frozen=True)
class AllotmentDocument:
    """Opaque allotment result set saved under a table-shaped name.

    Attributes:
        saved_at: Caller-supplied save timestamp text.
        headers: Any JSON-serializable header structure.
        rows: Any JSON-serializable row structure.
    """

    saved_at: str | None
    headers: Any = field(default_factory=list)
    rows: Any = field(default_factory=list)


@dataclass(frozen=True)
class StoredAllotment:
    """Allotment document as read back from its store."""

    row_id: int
    document: AllotmentDocument
    created_at: str | None
