"""Application context holding every open store.

This module replaces process-wide database globals with one object that
opens the stores in a fixed order at startup, hands out domain services,
and closes every store at shutdown.
"""

from __future__ import annotations

from types import TracebackType
from typing import Iterable, Mapping

from core.config import CsvDeskConfig
from core.constants import (
    ALLOTMENT_STORE_FILE_NAME,
    ALLOTMENT_STORE_NAME,
    EXAM_STORE_FILE_NAME,
    EXAM_STORE_NAME,
    GENERAL_STORE_FILE_NAME,
    GENERAL_STORE_NAME,
    SCHEDULING_STORE_FILE_NAME,
    SCHEDULING_STORE_NAME,
)
from core.errors import NotFoundError, StorageError
from core.logging_config import get_logger
from core.types import DOMAINS, Domain
from ingest.pipeline import IngestionOrchestrator
from store.document_store import AllotmentStore
from store.schema_evolution import ensure_merged_table
from store.sqlite_store import SqliteStore
from store.table_browser import TableBrowser

_LOGGER = get_logger(__name__)

STORE_FILES: tuple[tuple[str, str], ...] = (
    (SCHEDULING_STORE_NAME, SCHEDULING_STORE_FILE_NAME),
    (GENERAL_STORE_NAME, GENERAL_STORE_FILE_NAME),
    (EXAM_STORE_NAME, EXAM_STORE_FILE_NAME),
    (ALLOTMENT_STORE_NAME, ALLOTMENT_STORE_FILE_NAME),
)


class AppContext:
    """Open stores plus the services built on them."""

    def __init__(self, config: CsvDeskConfig, stores: Mapping[str, SqliteStore]) -> None:
        self.config = config
        self._stores = dict(stores)
        self.allotments = AllotmentStore(self.store(ALLOTMENT_STORE_NAME))

    @classmethod
    def open(cls, config: CsvDeskConfig) -> "AppContext":
        """Open every store one after another.

        Args:
            config: Runtime configuration with the data root.

        Returns:
            Context whose stores are all open.

        Raises:
            StorageError: Naming the first store that failed to open. Stores
                opened before it are closed again.
        """
        opened: dict[str, SqliteStore] = {}
        for store_name, file_name in STORE_FILES:
            store = SqliteStore(
                name=store_name,
                path=config.data_root / file_name,
                busy_timeout_seconds=config.busy_timeout_seconds,
                echo_sql=config.echo_sql,
            )
            try:
                store.open()
                _initialize_store(store)
            except StorageError as error:
                _LOGGER.error("store_open_failed", store=store_name, error=str(error))
                store_errors = _close_stores([store, *opened.values()])
                raise StorageError(
                    f"Failed to initialize the {store_name} store: {error}"
                    + _format_close_errors(store_errors)
                ) from error
            opened[store_name] = store
        return cls(config, opened)

    def close(self) -> None:
        """Close every store; a failing store does not stop the others."""
        _close_stores(self._stores.values())

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def store(self, name: str) -> SqliteStore:
        try:
            return self._stores[name]
        except KeyError as error:
            raise NotFoundError(f"Unknown store '{name}'.") from error

    def domain(self, name: str) -> Domain:
        try:
            return DOMAINS[name]
        except KeyError as error:
            supported = ", ".join(DOMAINS)
            raise NotFoundError(f"Unknown domain '{name}'. Use one of: {supported}.") from error

    def ingestion(self, domain_name: str) -> IngestionOrchestrator:
        domain = self.domain(domain_name)
        return IngestionOrchestrator(self.store(domain.name), domain)

    def tables(self, domain_name: str) -> TableBrowser:
        domain = self.domain(domain_name)
        return TableBrowser(self.store(domain.name), domain)

    def status(self) -> dict[str, str]:
        """Return a connection status line per store."""
        return {
            name: f"{name} store {'connected' if store.is_open else 'closed'}"
            for name, store in self._stores.items()
        }


def _initialize_store(store: SqliteStore) -> None:
    domain = DOMAINS.get(store.name)
    if domain is not None:
        ensure_merged_table(store, domain.merged_table)


def _close_stores(stores: Iterable[SqliteStore]) -> list[str]:
    """Close stores in order, logging and collecting failures."""
    errors: list[str] = []
    for store in stores:
        try:
            store.close()
        except StorageError as error:
            _LOGGER.error("store_close_failed", store=store.name, error=str(error))
            errors.append(str(error))
    return errors


def _format_close_errors(errors: list[str]) -> str:
    if not errors:
        return ""
    return f" (also failed to close: {'; '.join(errors)})"
