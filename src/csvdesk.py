"""Public SDK surface for csvdesk.

This module provides a stable import path for SDK users.
It re-exports the primary client, the application context and typed models.
"""

from __future__ import annotations

from api.operations import OperationDispatcher
from core.config import CsvDeskConfig
from core.errors import CsvDeskError
from core.types import (
    AllotmentDocument,
    FileOutcome,
    IngestReport,
    ParsedFile,
    RowChange,
    StoredAllotment,
    TableInfo,
)
from ingest.csv_reader import read_csv_files
from store.app_context import AppContext
from store.client_sdk import CsvDeskClient

__all__ = [
    "AllotmentDocument",
    "AppContext",
    "CsvDeskClient",
    "CsvDeskConfig",
    "CsvDeskError",
    "FileOutcome",
    "IngestReport",
    "OperationDispatcher",
    "ParsedFile",
    "RowChange",
    "StoredAllotment",
    "TableInfo",
    "read_csv_files",
]
