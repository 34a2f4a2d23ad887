"""Python SDK for csvdesk workflows.

This module exposes high-level APIs for CSV ingestion, table browsing,
allotment documents, and named operations. Each call opens the stores,
runs against one application context, and closes them again.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from api.operations import OperationDispatcher
from api.payloads import allotment_document_from_payload, expect_mapping
from core.config import CsvDeskConfig
from core.constants import DEFAULT_DOMAIN_NAME
from core.errors import InvalidPayloadError
from core.run_spec_execution import execute_run_spec_file
from core.types import AllotmentDocument, IngestReport, RowChange, StoredAllotment, TableInfo
from ingest.csv_reader import read_csv_files
from store.app_context import AppContext


class CsvDeskClient:
    """Primary SDK entry point for csvdesk workflows."""

    def __init__(self, config: CsvDeskConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or CsvDeskConfig.from_env()

    @property
    def config(self) -> CsvDeskConfig:
        return self._config

    def with_data_root(self, data_root: str) -> "CsvDeskClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        return CsvDeskClient(replace(self._config, data_root=resolved_root))

    def open_context(self) -> AppContext:
        """Open every store; the caller owns closing the context."""
        return AppContext.open(self._config)

    def ingest_paths(
        self,
        source_paths: Sequence[str],
        domain: str = DEFAULT_DOMAIN_NAME,
    ) -> IngestReport:
        """Read CSV files from disk and ingest them as one batch.

        Args:
            source_paths: CSV files or directories holding CSV files.
            domain: Target domain, ``general`` or ``exam``.

        Returns:
            Batch ingestion report.

        Raises:
            CsvReadError: If a source cannot be read.
            NotFoundError: If the domain is unknown.
        """
        parsed_files = read_csv_files(source_paths)
        with self._context() as context:
            return context.ingestion(domain).ingest(parsed_files)

    def list_tables(
        self,
        domain: str = DEFAULT_DOMAIN_NAME,
        include_hidden: bool = True,
    ) -> tuple[str, ...]:
        with self._context() as context:
            return context.tables(domain).list_tables(include_hidden=include_hidden)

    def fetch_rows(self, table: str, domain: str = DEFAULT_DOMAIN_NAME) -> list[dict[str, Any]]:
        with self._context() as context:
            return context.tables(domain).fetch_rows(table)

    def describe_table(self, table: str, domain: str = DEFAULT_DOMAIN_NAME) -> TableInfo:
        with self._context() as context:
            return context.tables(domain).describe_table(table)

    def update_row(
        self,
        table: str,
        pk_column: str,
        row_id: object,
        updated_data: Mapping[str, Any],
        domain: str = DEFAULT_DOMAIN_NAME,
    ) -> RowChange:
        with self._context() as context:
            return context.tables(domain).update_row(table, pk_column, row_id, updated_data)

    def delete_row(
        self,
        table: str,
        row_id: object,
        pk_column: str | None = None,
        domain: str = DEFAULT_DOMAIN_NAME,
    ) -> RowChange:
        with self._context() as context:
            return context.tables(domain).delete_row(table, row_id, pk_column)

    def drop_table(self, table: str, domain: str = DEFAULT_DOMAIN_NAME) -> None:
        with self._context() as context:
            context.tables(domain).drop_table(table)

    def save_allotment(self, name: str, document: AllotmentDocument) -> None:
        with self._context() as context:
            context.allotments.put(name, document)

    def save_allotment_file(self, name: str, json_path: str) -> None:
        """Save an allotment document read from a JSON file.

        Args:
            name: Table-shaped document name.
            json_path: File holding ``{"saved_at", "headers", "rows"}``.

        Raises:
            InvalidPayloadError: If the file is unreadable or not a JSON object.
        """
        self.save_allotment(name, _read_allotment_document(Path(json_path).expanduser()))

    def load_allotment(self, name: str) -> StoredAllotment | None:
        with self._context() as context:
            return context.allotments.get(name)

    def list_allotments(self) -> tuple[str, ...]:
        with self._context() as context:
            return context.allotments.list()

    def delete_allotment(self, name: str) -> None:
        with self._context() as context:
            context.allotments.delete(name)

    def invoke(self, operation: str, payload: object = None) -> dict[str, Any]:
        """Run one named operation through the dispatcher.

        Args:
            operation: Operation name, e.g. ``get_tables``.
            payload: JSON object with operation arguments.

        Returns:
            Structured operation result with a ``success`` flag.
        """
        with self._context() as context:
            return OperationDispatcher(context).dispatch(operation, payload)

    def run_spec(self, spec_file: str) -> tuple[str, ...]:
        """Execute a YAML run-spec through the shared execution engine.

        Args:
            spec_file: Path to YAML run-spec file.

        Returns:
            Ordered command output lines.
        """
        return execute_run_spec_file(self, spec_file)

    @contextmanager
    def _context(self) -> Iterator[AppContext]:
        with AppContext.open(self._config) as context:
            yield context


def _read_allotment_document(json_path: Path) -> AllotmentDocument:
    try:
        payload = json.loads(json_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise InvalidPayloadError(
            f"Failed to read allotment JSON at {json_path}: {error}. Check the path and retry."
        ) from error
    except json.JSONDecodeError as error:
        raise InvalidPayloadError(
            f"Failed to parse allotment JSON at {json_path}: {error}. Fix JSON syntax and retry."
        ) from error
    return allotment_document_from_payload(expect_mapping(payload, f"allotment file {json_path}"))
