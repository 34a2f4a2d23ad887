"""Pytest fixtures shared by unit and integration tests."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from core.config import CsvDeskConfig
from core.constants import DEFAULT_BUSY_TIMEOUT_SECONDS
from store.app_context import AppContext
from store.client_sdk import CsvDeskClient
from store.sqlite_store import SqliteStore


@pytest.fixture
def csvdesk_config(tmp_path: Path) -> CsvDeskConfig:
    """Config rooted in a per-test temporary directory."""
    return CsvDeskConfig(
        data_root=tmp_path / "data",
        busy_timeout_seconds=DEFAULT_BUSY_TIMEOUT_SECONDS,
        echo_sql=False,
    )


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Iterator[SqliteStore]:
    """Open scratch store closed after the test."""
    store = SqliteStore(name="scratch", path=tmp_path / "scratch.db")
    store.open()
    yield store
    store.close()


@pytest.fixture
def app_context(csvdesk_config: CsvDeskConfig) -> Iterator[AppContext]:
    """Application context with every store open."""
    with AppContext.open(csvdesk_config) as context:
        yield context


@pytest.fixture
def client(csvdesk_config: CsvDeskConfig) -> CsvDeskClient:
    return CsvDeskClient(csvdesk_config)
