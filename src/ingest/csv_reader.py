"""CSV source readers for ingestion.

This module loads CSV files from local paths into parsed file records.
It normalizes inputs into typed records for the ingestion orchestrator.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from core.constants import CSV_FILE_ENCODING
from core.errors import CsvReadError
from core.types import ParsedFile


def read_csv_files(source_paths: Iterable[str]) -> list[ParsedFile]:
    """Load parsed files from CSV paths or directories.

    Args:
        source_paths: CSV files, or directories scanned for ``*.csv``.

    Returns:
        Parsed files in argument order, directory entries sorted by name.

    Raises:
        CsvReadError: If a path is missing, unreadable, or holds no CSV files.
    """
    parsed_files: list[ParsedFile] = []
    for source_path in source_paths:
        path = Path(source_path).expanduser()
        if path.is_dir():
            parsed_files.extend(_read_directory(path))
        else:
            parsed_files.append(read_csv_file(path))
    return parsed_files


def read_csv_file(file_path: Path) -> ParsedFile:
    """Read one CSV file with a header row.

    Args:
        file_path: CSV file path.

    Returns:
        Parsed file named after the file stem.

    Raises:
        CsvReadError: If the file is missing or cannot be decoded.
    """
    if not file_path.is_file():
        raise CsvReadError(
            f"Failed to read CSV at {file_path}: file does not exist. "
            "Provide an existing .csv file or directory."
        )
    try:
        with file_path.open("r", encoding=CSV_FILE_ENCODING, newline="") as handle:
            reader = csv.DictReader(handle)
            headers = tuple(reader.fieldnames or ())
            rows = tuple(_without_overflow(row) for row in reader)
    except (OSError, UnicodeDecodeError, csv.Error) as error:
        raise CsvReadError(
            f"Failed to read CSV at {file_path}: {error}. "
            "Save the file as UTF-8 CSV and retry."
        ) from error
    return ParsedFile(name=file_path.stem, headers=headers, rows=rows)


def _read_directory(directory: Path) -> list[ParsedFile]:
    csv_paths = sorted(
        path for path in directory.iterdir() if path.is_file() and path.suffix.lower() == ".csv"
    )
    if not csv_paths:
        raise CsvReadError(f"No .csv files found under {directory}.")
    return [read_csv_file(path) for path in csv_paths]


def _without_overflow(row: dict[str | None, object]) -> dict[str, object]:
    """Drop the ``None`` key DictReader uses for cells beyond the header."""
    return {key: value for key, value in row.items() if key is not None}
