"""Unit tests for run-spec CLI execution."""

from __future__ import annotations

from pathlib import Path

import pytest

from cli.main import main
from store.client_sdk import CsvDeskClient
from tests.fixture_paths import fixture_path


def test_cli_run_spec_executes_every_step(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Run-spec command should print one block of output per step."""
    data_root = tmp_path / "data"

    exit_code = main(
        ["--data-root", str(data_root), "run-spec", str(fixture_path("run_spec/valid_batch.yaml"))]
    )
    output_lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert output_lines == [
        "results_a\t1\t1",
        "results_b\t1\t1",
        "2 files processed",
        "all_csv_data",
        "results_a",
        "results_b",
        "Allotment table 'hall_plan' saved successfully",
        "Table results_b deleted",
    ]
    client = CsvDeskClient().with_data_root(str(data_root))
    assert client.list_tables() == ("all_csv_data", "results_a")
    assert client.list_allotments() == ("hall_plan",)


def test_cli_run_spec_invalid_file_exits_with_error(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = main(
        [
            "--data-root",
            str(tmp_path),
            "run-spec",
            str(fixture_path("run_spec/invalid_command.yaml")),
        ]
    )

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("error=Unsupported command 'export'")
