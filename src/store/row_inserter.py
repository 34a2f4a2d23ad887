"""Conditional row insertion with full-row deduplication.

A row is written only when no existing row matches it on every column of
the insertion's own column list. The existence check and the insert are a
single ``INSERT ... SELECT ... WHERE NOT EXISTS`` statement.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.constants import SOURCE_FILE_COLUMN
from core.identifiers import quote_identifier
from store.sqlite_store import SqliteStore


def insert_if_absent(
    store: SqliteStore,
    table: str,
    columns: Sequence[str],
    values_by_column: Mapping[str, str],
    source_file: str,
) -> bool:
    """Insert a row unless an identical one already exists.

    Equality is judged only on ``columns``; ``source_file`` and any columns
    other files added to the table are ignored. Columns not listed stay
    at their default in the new row.

    Args:
        store: Open store holding the table.
        table: Sanitized table name that already has every listed column.
        columns: Sanitized column names defining both payload and dedup scope.
        values_by_column: Row values keyed by sanitized column name.
        source_file: Raw name of the file the row came from.

    Returns:
        True when the row was added.

    Raises:
        StorageError: If the engine rejects the statement.
    """
    params: dict[str, str] = {}
    placeholders: list[str] = []
    match_terms: list[str] = []
    for index, column in enumerate(columns):
        param_name = f"v{index}"
        params[param_name] = values_by_column.get(column, "")
        placeholders.append(f":{param_name}")
        match_terms.append(f"{quote_identifier(column)} = :{param_name}")
    params["source_file"] = source_file
    target_columns = [quote_identifier(column) for column in columns]
    target_columns.append(SOURCE_FILE_COLUMN)
    placeholders.append(":source_file")
    match_sql = " AND ".join(match_terms) if match_terms else "1 = 1"
    table_sql = quote_identifier(table)
    sql = (
        f"INSERT INTO {table_sql} ({', '.join(target_columns)}) "
        f"SELECT {', '.join(placeholders)} "
        f"WHERE NOT EXISTS (SELECT 1 FROM {table_sql} WHERE {match_sql})"
    )
    return store.execute(sql, params) > 0
