"""Unit tests for the named-operation dispatcher."""

from __future__ import annotations

import json

import pytest

from api.operations import OperationDispatcher
from store.app_context import AppContext


@pytest.fixture
def dispatcher(app_context: AppContext) -> OperationDispatcher:
    return OperationDispatcher(app_context)


def _ingest_payload(
    name: str,
    headers: list[str],
    rows: list[dict[str, str]],
) -> dict[str, object]:
    return {"files": [{"name": name, "headers": headers, "rows": rows}]}


def test_operation_names_cover_both_domains(dispatcher: OperationDispatcher) -> None:
    names = dispatcher.operation_names()

    assert "insert_csv_files" in names and "exam_insert_csv_files" in names
    assert "save_allotment_table" in names and "test_db" in names


def test_test_db_reports_store_status(dispatcher: OperationDispatcher) -> None:
    result = dispatcher.dispatch("test_db")

    assert result["success"] is True
    assert result["stores"]["allotment"] == "allotment store connected"


def test_insert_csv_files_reports_file_count(dispatcher: OperationDispatcher) -> None:
    result = dispatcher.dispatch(
        "insert_csv_files",
        _ingest_payload("A", ["Name", "Score"], [{"Name": "Bob", "Score": "9"}]),
    )

    assert result["success"] is True
    assert result["message"] == "1 files processed"
    assert result["outcomes"][0]["rows_inserted"] == 1


def test_insert_csv_files_storage_failure_is_reported(dispatcher: OperationDispatcher) -> None:
    """Engine failures during ingestion come back as an unsuccessful result."""
    result = dispatcher.dispatch(
        "insert_csv_files",
        _ingest_payload("bad", ["source_file"], [{"source_file": "x"}]),
    )

    assert result["success"] is False
    assert result["error_type"] == "StorageError"
    assert "duplicate column" in result["error"]


def test_exam_get_tables_hides_internal_tables_by_default(
    dispatcher: OperationDispatcher,
) -> None:
    dispatcher.dispatch(
        "exam_insert_csv_files",
        _ingest_payload("halls", ["Hall"], [{"Hall": "H1"}]),
    )

    hidden = dispatcher.dispatch("exam_get_tables")
    shown = dispatcher.dispatch("exam_get_tables", {"include_hidden": True})

    assert hidden["tables"] == ["halls"]
    assert shown["tables"] == ["all_exam_csv_data", "halls"]


def test_table_round_trip_through_operations(dispatcher: OperationDispatcher) -> None:
    """Rows ingested through one operation should be editable through others."""
    dispatcher.dispatch(
        "insert_csv_files",
        _ingest_payload("A", ["Name", "Score"], [{"Name": "Bob", "Score": "9"}]),
    )

    update = dispatcher.dispatch(
        "update_row",
        {"table_name": "A", "pk_column": "id", "row_id": 1, "updated_data": {"Score": "10"}},
    )
    rows = dispatcher.dispatch("get_table_data", {"table_name": "A"})["rows"]
    info = dispatcher.dispatch("get_table_info", {"table_name": "A"})
    delete = dispatcher.dispatch("delete_row", {"table_name": "A", "row_id": 1})
    dropped = dispatcher.dispatch("delete_table", {"table_name": "A"})

    assert update["changes"] == 1 and rows[0]["Score"] == "10"
    assert info["primary_key"] == "id"
    assert delete["message"] == "Deleted 1 row(s)"
    assert dropped["message"] == "Table A deleted"


def test_missing_parameter_is_reported(dispatcher: OperationDispatcher) -> None:
    result = dispatcher.dispatch("get_table_data", {})

    assert result == {
        "success": False,
        "error": "Missing required parameter 'table_name'.",
        "error_type": "MissingParameterError",
    }


def test_invalid_table_name_is_reported(dispatcher: OperationDispatcher) -> None:
    result = dispatcher.dispatch("delete_table", {"table_name": "A; DROP TABLE all_csv_data"})

    assert result["success"] is False and result["error_type"] == "InvalidIdentifierError"


def test_unknown_operation_is_reported(dispatcher: OperationDispatcher) -> None:
    result = dispatcher.dispatch("format_disk")

    assert result["success"] is False and result["error_type"] == "NotFoundError"


def test_non_object_payload_is_reported(dispatcher: OperationDispatcher) -> None:
    result = dispatcher.dispatch("get_tables", ["not", "an", "object"])

    assert result["error_type"] == "InvalidPayloadError"


def test_allotment_operations_round_trip(dispatcher: OperationDispatcher) -> None:
    """Saved allotments should read back with decoded headers and rows."""
    payload = {
        "table_name": "hall_plan",
        "saved_at": "2024-03-01",
        "headers": ["Hall"],
        "rows": [["H1"]],
    }

    saved = dispatcher.dispatch("save_allotment_table", payload)
    dispatcher.dispatch("save_allotment_table", {**payload, "rows": [["H2"]]})
    data = dispatcher.dispatch("get_allotment_table_data", {"table_name": "hall_plan"})
    listed = dispatcher.dispatch("get_allotment_tables")
    exists = dispatcher.dispatch("allotment_table_exists", {"table_name": "hall_plan"})
    info = dispatcher.dispatch("get_allotment_table_info", {"table_name": "hall_plan"})
    deleted = dispatcher.dispatch("delete_allotment_table", {"table_name": "hall_plan"})

    assert saved["message"] == "Allotment table 'hall_plan' saved successfully"
    assert len(data["rows"]) == 1
    assert data["rows"][0]["row_data"] == [["H2"]] and data["rows"][0]["header_data"] == ["Hall"]
    assert listed["tables"] == ["hall_plan"] and exists["exists"] is True
    assert [column["name"] for column in info["columns"]][:2] == ["id", "saved_at"]
    assert deleted["success"] is True
    assert dispatcher.dispatch("get_allotment_tables")["tables"] == []


def test_results_are_json_serializable(dispatcher: OperationDispatcher) -> None:
    dispatcher.dispatch(
        "insert_csv_files",
        _ingest_payload("A", ["Name"], [{"Name": "Bob"}]),
    )

    result = dispatcher.dispatch("get_table_data", {"table_name": "all_csv_data"})

    assert json.loads(json.dumps(result))["rows"][0]["Name"] == "Bob"
