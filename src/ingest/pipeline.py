"""Batch CSV ingestion orchestration.

This module drives schema evolution and deduplicated inserts for a batch of
parsed files, fanning every row out to its per-file table and to the domain
merged table. A failure stops the batch but keeps earlier files' rows.
"""

from __future__ import annotations

from typing import Sequence

from core.errors import StorageError
from core.logging_config import get_logger
from core.types import Domain, FileOutcome, IngestReport, ParsedFile
from ingest.row_normalizer import NormalizedFile, normalize_file, sanitize_headers
from store.row_inserter import insert_if_absent
from store.schema_evolution import ensure_columns, unique_columns
from store.sqlite_store import SqliteStore

_LOGGER = get_logger(__name__)


class IngestionOrchestrator:
    """Ingests parsed CSV batches into one domain store."""

    def __init__(self, store: SqliteStore, domain: Domain) -> None:
        self._store = store
        self._domain = domain

    def ingest(self, files: Sequence[ParsedFile]) -> IngestReport:
        """Ingest a batch of parsed files in input order.

        Args:
            files: Parsed files; headers may differ between files.

        Returns:
            Report with per-file outcomes. On a storage failure the report
            is unsuccessful, carries the engine message, and lists only the
            files completed before the failure.
        """
        outcomes: list[FileOutcome] = []
        try:
            self._prepare_merged_table(files)
            for parsed_file in files:
                outcomes.append(self._ingest_file(parsed_file))
        except StorageError as error:
            _LOGGER.error(
                "ingest_failed",
                store=self._store.name,
                file_count=len(files),
                processed_file_count=len(outcomes),
                error=str(error),
            )
            return IngestReport(
                success=False,
                file_count=len(files),
                outcomes=tuple(outcomes),
                error=str(error),
            )
        _log_ingest_completion(self._store.name, outcomes)
        return IngestReport(success=True, file_count=len(files), outcomes=tuple(outcomes))

    def _prepare_merged_table(self, files: Sequence[ParsedFile]) -> None:
        """Grow the merged table once so no row insert needs an alteration."""
        all_columns = unique_columns(
            column for parsed_file in files for column in sanitize_headers(parsed_file.headers)
        )
        ensure_columns(self._store, self._domain.merged_table, all_columns)

    def _ingest_file(self, parsed_file: ParsedFile) -> FileOutcome:
        normalized = normalize_file(parsed_file.name, parsed_file.headers, parsed_file.rows)
        ensure_columns(self._store, normalized.table_name, normalized.columns)
        rows_inserted, merged_rows_inserted = self._insert_rows(parsed_file.name, normalized)
        outcome = FileOutcome(
            file_name=parsed_file.name,
            table_name=normalized.table_name,
            rows_read=len(parsed_file.rows),
            rows_blank=normalized.blank_row_count,
            rows_inserted=rows_inserted,
            merged_rows_inserted=merged_rows_inserted,
        )
        _LOGGER.info(
            "file_ingested",
            store=self._store.name,
            file_name=outcome.file_name,
            table=outcome.table_name,
            rows_read=outcome.rows_read,
            rows_blank=outcome.rows_blank,
            rows_inserted=outcome.rows_inserted,
            merged_rows_inserted=outcome.merged_rows_inserted,
        )
        return outcome

    def _insert_rows(self, source_file: str, normalized: NormalizedFile) -> tuple[int, int]:
        rows_inserted = 0
        merged_rows_inserted = 0
        for row in normalized.rows:
            if insert_if_absent(
                self._store, normalized.table_name, normalized.columns, row, source_file
            ):
                rows_inserted += 1
            if insert_if_absent(
                self._store, self._domain.merged_table, normalized.columns, row, source_file
            ):
                merged_rows_inserted += 1
        return rows_inserted, merged_rows_inserted


def ingest_files(store: SqliteStore, domain: Domain, files: Sequence[ParsedFile]) -> IngestReport:
    """Run one ingestion batch against a domain store.

    Args:
        store: Open domain store.
        domain: Domain naming the merged table.
        files: Parsed files to ingest.

    Returns:
        Batch ingestion report.
    """
    return IngestionOrchestrator(store, domain).ingest(files)


def _log_ingest_completion(store_name: str, outcomes: list[FileOutcome]) -> None:
    """Log batch completion with aggregate counts."""
    _LOGGER.info(
        "ingest_completed",
        store=store_name,
        file_count=len(outcomes),
        rows_inserted=sum(outcome.rows_inserted for outcome in outcomes),
        merged_rows_inserted=sum(outcome.merged_rows_inserted for outcome in outcomes),
    )
