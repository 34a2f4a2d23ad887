"""Row normalization for parsed CSV files.

This module maps raw headers to sanitized column names and turns raw
rows into trimmed text mappings, dropping rows with no content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from core.identifiers import sanitize
from core.logging_config import get_logger
from store.schema_evolution import unique_columns

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class NormalizedFile:
    """Sanitized view of one parsed file.

    Attributes:
        table_name: Sanitized per-file table name.
        columns: Sanitized, de-duplicated column names in header order.
        rows: Non-blank rows keyed by sanitized column name.
        blank_row_count: Rows dropped because every value was blank.
    """

    table_name: str
    columns: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    blank_row_count: int


def sanitize_headers(headers: Iterable[str]) -> tuple[str, ...]:
    """Sanitize headers in order, keeping one entry per distinct column."""
    return unique_columns(sanitize(header) for header in headers)


def normalize_file(
    file_name: str,
    headers: Iterable[str],
    rows: Iterable[Mapping[str, Any]],
) -> NormalizedFile:
    """Sanitize a parsed file and drop its fully blank rows.

    Args:
        file_name: Raw file name.
        headers: Raw header names in file order.
        rows: Raw rows keyed by raw header name.

    Returns:
        Normalized file ready for schema evolution and insertion.
    """
    raw_headers = tuple(headers)
    column_by_header = _column_by_header(file_name, raw_headers)
    columns = unique_columns(column_by_header[header] for header in raw_headers)
    normalized_rows: list[dict[str, str]] = []
    blank_row_count = 0
    for raw_row in rows:
        row = {column: "" for column in columns}
        for header in raw_headers:
            # Colliding headers share a column; a blank cell never hides another's value.
            value = _clean_value(raw_row.get(header))
            if value:
                row[column_by_header[header]] = value
        if not any(row.values()):
            blank_row_count += 1
            continue
        normalized_rows.append(row)
    return NormalizedFile(
        table_name=sanitize(file_name),
        columns=columns,
        rows=tuple(normalized_rows),
        blank_row_count=blank_row_count,
    )


def _column_by_header(file_name: str, headers: tuple[str, ...]) -> dict[str, str]:
    """Map raw headers onto canonical column spellings, logging collisions."""
    canonical_by_key: dict[str, str] = {}
    column_by_header: dict[str, str] = {}
    for header in headers:
        column = sanitize(header)
        canonical = canonical_by_key.setdefault(column.lower(), column)
        if header in column_by_header:
            continue
        if canonical in column_by_header.values():
            _LOGGER.warning(
                "identifier_collision",
                file_name=file_name,
                header=header,
                column=canonical,
            )
        column_by_header[header] = canonical
    return column_by_header


def _clean_value(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()
