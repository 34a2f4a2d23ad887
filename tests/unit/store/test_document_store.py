"""Unit tests for the allotment document store."""

from __future__ import annotations

import pytest

from core.errors import CorruptDocumentError, InvalidIdentifierError, NotFoundError, StorageError
from core.types import AllotmentDocument
from store.document_store import AllotmentStore
from store.sqlite_store import SqliteStore


def test_put_then_get_returns_decoded_document(sqlite_store: SqliteStore) -> None:
    allotments = AllotmentStore(sqlite_store)
    document = AllotmentDocument(
        saved_at="2024-03-01T09:00:00",
        headers=["Hall", "Roll No"],
        rows=[["H1", "101"], {"hall": "H2", "seats": [1, 2]}],
    )

    allotments.put("hall_plan", document)
    stored = allotments.get("hall_plan")

    assert stored is not None
    assert stored.document == document
    assert stored.created_at


def test_put_twice_keeps_only_latest_document(sqlite_store: SqliteStore) -> None:
    """Saving again should fully replace the earlier document."""
    allotments = AllotmentStore(sqlite_store)
    allotments.put("hall_plan", AllotmentDocument(saved_at="first", rows=[["H1"]]))

    allotments.put("hall_plan", AllotmentDocument(saved_at="second", rows=[["H2"]]))

    rows = sqlite_store.fetch_all('SELECT * FROM "hall_plan"')
    stored = allotments.get("hall_plan")
    assert len(rows) == 1
    assert stored is not None and stored.document.saved_at == "second"
    assert stored.document.rows == [["H2"]]


def test_get_missing_document_returns_none(sqlite_store: SqliteStore) -> None:
    assert AllotmentStore(sqlite_store).get("never_saved") is None


def test_get_corrupt_json_raises(sqlite_store: SqliteStore) -> None:
    """An undecodable blob should fail the read instead of degrading."""
    allotments = AllotmentStore(sqlite_store)
    allotments.put("hall_plan", AllotmentDocument(saved_at="t"))
    sqlite_store.execute('UPDATE "hall_plan" SET row_data = :blob', {"blob": "{not json"})

    with pytest.raises(CorruptDocumentError, match="row_data"):
        allotments.get("hall_plan")


def test_get_null_blobs_decode_as_empty_lists(sqlite_store: SqliteStore) -> None:
    allotments = AllotmentStore(sqlite_store)
    allotments.put("hall_plan", AllotmentDocument(saved_at=None))
    sqlite_store.execute('UPDATE "hall_plan" SET header_data = NULL, row_data = NULL')

    stored = allotments.get("hall_plan")

    assert stored is not None and stored.document.headers == [] and stored.document.rows == []


def test_get_table_without_allotment_columns_raises(sqlite_store: SqliteStore) -> None:
    sqlite_store.execute('CREATE TABLE "other" (id INTEGER PRIMARY KEY, value TEXT)')
    sqlite_store.execute('INSERT INTO "other" (value) VALUES (\'x\')')

    with pytest.raises(NotFoundError, match="not an allotment"):
        AllotmentStore(sqlite_store).get("other")


def test_put_rejects_unserializable_document(sqlite_store: SqliteStore) -> None:
    allotments = AllotmentStore(sqlite_store)

    with pytest.raises(StorageError, match="JSON-serializable"):
        allotments.put("hall_plan", AllotmentDocument(saved_at="t", rows=[object()]))

    assert not allotments.exists("hall_plan")


@pytest.mark.parametrize("bad_name", ["hall plan", "plan;DROP TABLE x", ""])
def test_every_operation_rejects_invalid_names(
    sqlite_store: SqliteStore,
    bad_name: str,
) -> None:
    """Invalid names should fail before any table is touched."""
    allotments = AllotmentStore(sqlite_store)

    with pytest.raises(InvalidIdentifierError):
        allotments.put(bad_name, AllotmentDocument(saved_at="t"))
    with pytest.raises(InvalidIdentifierError):
        allotments.get(bad_name)
    with pytest.raises(InvalidIdentifierError):
        allotments.exists(bad_name)
    with pytest.raises(InvalidIdentifierError):
        allotments.delete(bad_name)
    assert sqlite_store.list_tables() == ()


def test_list_exists_and_delete(sqlite_store: SqliteStore) -> None:
    allotments = AllotmentStore(sqlite_store)
    allotments.put("plan_a", AllotmentDocument(saved_at="t"))
    allotments.put("plan_b", AllotmentDocument(saved_at="t"))

    allotments.delete("plan_a")
    allotments.delete("plan_a")

    assert allotments.list() == ("plan_b",)
    assert allotments.exists("plan_b") and not allotments.exists("plan_a")


def test_describe_reports_fixed_columns(sqlite_store: SqliteStore) -> None:
    allotments = AllotmentStore(sqlite_store)
    allotments.put("hall_plan", AllotmentDocument(saved_at="t"))

    info = allotments.describe("hall_plan")

    assert [column.name for column in info.columns] == [
        "id",
        "saved_at",
        "header_data",
        "row_data",
        "created_at",
    ]
    assert info.primary_key == "id"
