"""Unit tests for batch ingestion orchestration."""

from __future__ import annotations

from core.types import GENERAL_DOMAIN, ParsedFile
from ingest.pipeline import IngestionOrchestrator, ingest_files
from store.schema_evolution import ensure_merged_table
from store.sqlite_store import SqliteStore


def _orchestrator(store: SqliteStore) -> IngestionOrchestrator:
    ensure_merged_table(store, GENERAL_DOMAIN.merged_table)
    return IngestionOrchestrator(store, GENERAL_DOMAIN)


def _merged_rows(store: SqliteStore) -> list[dict[str, object]]:
    return store.fetch_all('SELECT * FROM "all_csv_data" ORDER BY id')


def test_ingest_writes_rows_to_file_and_merged_tables(sqlite_store: SqliteStore) -> None:
    report = _orchestrator(sqlite_store).ingest(
        [ParsedFile(name="A", headers=("Name", "Score"), rows=({"Name": "Bob", "Score": "9"},))]
    )

    assert report.success and report.file_count == 1
    assert report.outcomes[0].rows_inserted == 1
    assert report.outcomes[0].merged_rows_inserted == 1
    merged = _merged_rows(sqlite_store)
    assert (merged[0]["Name"], merged[0]["Score"], merged[0]["source_file"]) == ("Bob", "9", "A")


def test_ingest_counts_blank_rows(sqlite_store: SqliteStore) -> None:
    report = _orchestrator(sqlite_store).ingest(
        [
            ParsedFile(
                name="halls",
                headers=("Hall",),
                rows=({"Hall": "H1"}, {"Hall": "  "}, {"Hall": None}),
            )
        ]
    )

    outcome = report.outcomes[0]
    assert (outcome.rows_read, outcome.rows_blank, outcome.rows_inserted) == (3, 2, 1)


def test_ingest_keeps_row_when_case_colliding_header_is_blank(
    sqlite_store: SqliteStore,
) -> None:
    """Headers differing only in case share a column without dropping real data."""
    report = _orchestrator(sqlite_store).ingest(
        [ParsedFile(name="A", headers=("Name", "name"), rows=({"Name": "a", "name": ""},))]
    )

    outcome = report.outcomes[0]
    assert (outcome.rows_blank, outcome.rows_inserted) == (0, 1)
    assert _merged_rows(sqlite_store)[0]["Name"] == "a"


def test_ingest_deduplicates_within_one_file(sqlite_store: SqliteStore) -> None:
    """Repeated identical rows in one file should be stored once."""
    row = {"Name": "Bob"}
    report = _orchestrator(sqlite_store).ingest(
        [ParsedFile(name="A", headers=("Name",), rows=(row, row))]
    )

    assert report.outcomes[0].rows_inserted == 1
    assert len(_merged_rows(sqlite_store)) == 1


def test_ingest_grows_merged_table_with_union_of_headers(sqlite_store: SqliteStore) -> None:
    _orchestrator(sqlite_store).ingest(
        [
            ParsedFile(name="A", headers=("Name", "Score"), rows=({"Name": "Bob", "Score": "9"},)),
            ParsedFile(name="B", headers=("Hall",), rows=({"Hall": "H1"},)),
        ]
    )

    assert sqlite_store.column_names("all_csv_data") == [
        "id",
        "source_file",
        "created_at",
        "Name",
        "Score",
        "Hall",
    ]
    assert [row["Hall"] for row in _merged_rows(sqlite_store)] == [None, "H1"]


def test_ingest_files_with_colliding_names_evolve_one_table(sqlite_store: SqliteStore) -> None:
    """Files whose names sanitize alike should share and grow one table."""
    ensure_merged_table(sqlite_store, GENERAL_DOMAIN.merged_table)
    files = [
        ParsedFile(name="hall-list", headers=("Hall",), rows=({"Hall": "H1"},)),
        ParsedFile(
            name="hall list",
            headers=("Hall", "Floor"),
            rows=({"Hall": "H2", "Floor": "2"},),
        ),
    ]

    report = ingest_files(sqlite_store, GENERAL_DOMAIN, files)

    assert report.success
    assert sqlite_store.column_names("hall_list") == ["id", "Hall", "source_file", "Floor"]
    assert len(sqlite_store.fetch_all('SELECT * FROM "hall_list"')) == 2


def test_ingest_zero_header_file_creates_minimal_table(sqlite_store: SqliteStore) -> None:
    report = _orchestrator(sqlite_store).ingest([ParsedFile(name="empty", headers=())])

    assert report.success and report.outcomes[0].rows_inserted == 0
    assert sqlite_store.column_names("empty") == ["id", "source_file"]


def test_ingest_storage_failure_keeps_earlier_files(sqlite_store: SqliteStore) -> None:
    """A failing file should stop the batch and report files completed before it."""
    report = _orchestrator(sqlite_store).ingest(
        [
            ParsedFile(name="good", headers=("Name",), rows=({"Name": "Bob"},)),
            ParsedFile(name="bad", headers=("source_file",), rows=({"source_file": "x"},)),
            ParsedFile(name="later", headers=("Name",), rows=({"Name": "Cara"},)),
        ]
    )

    assert not report.success
    assert report.file_count == 3 and report.processed_file_count == 1
    assert report.error is not None and "duplicate column" in report.error
    assert len(sqlite_store.fetch_all('SELECT * FROM "good"')) == 1
    assert not sqlite_store.table_exists("later")
