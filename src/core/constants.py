"""Core constants used across csvdesk modules.

This module centralizes store file names, reserved column names,
and configuration defaults. Keeping values here avoids magic literals.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".csvdesk")
DEFAULT_BUSY_TIMEOUT_SECONDS = 5.0

SCHEDULING_STORE_NAME = "scheduling"
GENERAL_STORE_NAME = "general"
EXAM_STORE_NAME = "exam"
ALLOTMENT_STORE_NAME = "allotment"

SCHEDULING_STORE_FILE_NAME = "collageexamination.db"
GENERAL_STORE_FILE_NAME = "uploadfile.db"
EXAM_STORE_FILE_NAME = "examfiles.db"
ALLOTMENT_STORE_FILE_NAME = "alloted.db"

GENERAL_MERGED_TABLE = "all_csv_data"
EXAM_MERGED_TABLE = "all_exam_csv_data"
EXAM_HIDDEN_TABLES = (EXAM_MERGED_TABLE, "exam_files_metadata", "merged_exam_data")

IDENTITY_COLUMN = "id"
SOURCE_FILE_COLUMN = "source_file"
CREATED_AT_COLUMN = "created_at"
TEXT_COLUMN_TYPE = "TEXT"
INTERNAL_TABLE_PREFIX = "sqlite_"

ALLOTMENT_SAVED_AT_COLUMN = "saved_at"
ALLOTMENT_HEADER_COLUMN = "header_data"
ALLOTMENT_ROW_COLUMN = "row_data"

CSV_FILE_ENCODING = "utf-8-sig"
RUN_SPEC_VERSION = 1
DEFAULT_DOMAIN_NAME = GENERAL_STORE_NAME
