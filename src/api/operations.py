"""Named operations over an application context.

Every operation takes a JSON-serializable payload and returns a JSON-
serializable dict with a ``success`` flag. Domain errors never cross this
boundary as exceptions; they come back as ``{"success": false, "error": ...}``.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable, Mapping

from api.payloads import (
    allotment_document_from_payload,
    expect_mapping,
    optional_bool,
    optional_string,
    parsed_files_from_payload,
    required_string,
    required_value,
)
from core.errors import CsvDeskError, NotFoundError
from core.logging_config import get_logger
from core.types import EXAM_DOMAIN, GENERAL_DOMAIN, Domain, StoredAllotment, TableInfo
from store.app_context import AppContext

_LOGGER = get_logger(__name__)

Handler = Callable[[AppContext, Mapping[str, Any]], dict[str, Any]]


class OperationDispatcher:
    """Routes operation names to handlers bound to one context."""

    def __init__(self, context: AppContext) -> None:
        self._context = context
        self._handlers = build_handlers()

    def operation_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._handlers))

    def dispatch(self, name: str, payload: object = None) -> dict[str, Any]:
        """Run one named operation.

        Args:
            name: Operation name, e.g. ``insert_csv_files``.
            payload: JSON object with the operation's arguments.

        Returns:
            Result dict; ``success`` is False with an ``error`` message when
            the operation failed.
        """
        handler = self._handlers.get(name)
        if handler is None:
            return _failure(name, NotFoundError(f"Unknown operation '{name}'."))
        try:
            arguments = expect_mapping(payload, f"payload of '{name}'")
            return {"success": True, **handler(self._context, arguments)}
        except CsvDeskError as error:
            return _failure(name, error)


def build_handlers() -> dict[str, Handler]:
    """Build the operation table for both ingestion domains and allotments."""
    handlers: dict[str, Handler] = {"test_db": _test_db}
    handlers.update(_domain_handlers(GENERAL_DOMAIN, prefix=""))
    handlers.update(_domain_handlers(EXAM_DOMAIN, prefix="exam_"))
    handlers.update(
        {
            "save_allotment_table": _save_allotment_table,
            "get_allotment_tables": _get_allotment_tables,
            "get_allotment_table_data": _get_allotment_table_data,
            "get_allotment_table_info": _get_allotment_table_info,
            "delete_allotment_table": _delete_allotment_table,
            "allotment_table_exists": _allotment_table_exists,
        }
    )
    return handlers


def _domain_handlers(domain: Domain, prefix: str) -> dict[str, Handler]:
    include_hidden = not domain.hidden_tables

    def insert_csv_files(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        files = parsed_files_from_payload(payload)
        report = context.ingestion(domain.name).ingest(files)
        result: dict[str, Any] = {
            "success": report.success,
            "file_count": report.file_count,
            "processed_file_count": report.processed_file_count,
            "outcomes": [asdict(outcome) for outcome in report.outcomes],
        }
        if report.success:
            result["message"] = f"{report.file_count} files processed"
        else:
            result["error"] = report.error
            result["error_type"] = "StorageError"
        return result

    def get_tables(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        hidden = optional_bool(payload, "include_hidden", include_hidden)
        tables = context.tables(domain.name).list_tables(include_hidden=hidden)
        return {"tables": list(tables)}

    def get_table_data(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        table = required_string(payload, "table_name")
        return {"rows": context.tables(domain.name).fetch_rows(table)}

    def get_table_info(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        table = required_string(payload, "table_name")
        return _table_info_result(context.tables(domain.name).describe_table(table))

    def update_row(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        updated_data = expect_mapping(required_value(payload, "updated_data"), "updated_data")
        change = context.tables(domain.name).update_row(
            table=required_string(payload, "table_name"),
            pk_column=required_string(payload, "pk_column"),
            row_id=required_value(payload, "row_id"),
            updated_data=updated_data,
        )
        return asdict(change)

    def delete_row(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        change = context.tables(domain.name).delete_row(
            table=required_string(payload, "table_name"),
            row_id=required_value(payload, "row_id"),
            pk_column=optional_string(payload, "pk_column"),
        )
        return asdict(change)

    def delete_table(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
        table = required_string(payload, "table_name")
        context.tables(domain.name).drop_table(table)
        return {"message": f"Table {table} deleted"}

    return {
        f"{prefix}insert_csv_files": insert_csv_files,
        f"{prefix}get_tables": get_tables,
        f"{prefix}get_table_data": get_table_data,
        f"{prefix}get_table_info": get_table_info,
        f"{prefix}update_row": update_row,
        f"{prefix}delete_row": delete_row,
        f"{prefix}delete_table": delete_table,
    }


def _test_db(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"stores": context.status()}


def _save_allotment_table(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    table = required_string(payload, "table_name")
    context.allotments.put(table, allotment_document_from_payload(payload))
    return {"message": f"Allotment table '{table}' saved successfully"}


def _get_allotment_tables(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"tables": list(context.allotments.list())}


def _get_allotment_table_data(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    stored = context.allotments.get(required_string(payload, "table_name"))
    return {"rows": [] if stored is None else [_stored_allotment_row(stored)]}


def _get_allotment_table_info(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    table = required_string(payload, "table_name")
    return _table_info_result(context.allotments.describe(table))


def _delete_allotment_table(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    table = required_string(payload, "table_name")
    context.allotments.delete(table)
    return {"message": f"Allotment table {table} deleted"}


def _allotment_table_exists(context: AppContext, payload: Mapping[str, Any]) -> dict[str, Any]:
    return {"exists": context.allotments.exists(required_string(payload, "table_name"))}


def _table_info_result(info: TableInfo) -> dict[str, Any]:
    return {
        "columns": [asdict(column) for column in info.columns],
        "primary_key": info.primary_key,
    }


def _stored_allotment_row(stored: StoredAllotment) -> dict[str, Any]:
    return {
        "id": stored.row_id,
        "saved_at": stored.document.saved_at,
        "header_data": stored.document.headers,
        "row_data": stored.document.rows,
        "created_at": stored.created_at,
    }


def _failure(operation: str, error: CsvDeskError) -> dict[str, Any]:
    error_type = type(error).__name__
    _LOGGER.warning(
        "operation_failed",
        operation=operation,
        error_type=error_type,
        error=str(error),
    )
    return {"success": False, "error": str(error), "error_type": error_type}
