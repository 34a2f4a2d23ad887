"""Type-safe argument parsing for named operations.

This module centralizes payload validation so every operation reports
missing or malformed arguments before touching any store.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from core.errors import InvalidPayloadError, MissingParameterError
from core.field_readers import read_optional_bool, read_optional_string
from core.types import AllotmentDocument, ParsedFile

_PARAMETER_LABEL = "Parameter"


def expect_mapping(value: object, context: str) -> Mapping[str, Any]:
    """Return a JSON object payload or fail with a payload error."""
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    raise InvalidPayloadError(
        f"Invalid {context}: expected a JSON object, got {type(value).__name__}."
    )


def required_value(payload: Mapping[str, Any], field_name: str) -> Any:
    """Read a field that must be present and non-empty."""
    value = payload.get(field_name)
    if value is None or value == "":
        raise MissingParameterError(f"Missing required parameter '{field_name}'.")
    return value


def required_string(payload: Mapping[str, Any], field_name: str) -> str:
    value = optional_string(payload, field_name)
    if not value:
        raise MissingParameterError(f"Missing required parameter '{field_name}'.")
    return value


def optional_string(payload: Mapping[str, Any], field_name: str) -> str | None:
    return read_optional_string(
        payload, field_name, error_type=InvalidPayloadError, label=_PARAMETER_LABEL, strip=False
    )


def optional_bool(payload: Mapping[str, Any], field_name: str, default_value: bool) -> bool:
    return read_optional_bool(
        payload, field_name, default_value, error_type=InvalidPayloadError, label=_PARAMETER_LABEL
    )


def parsed_files_from_payload(payload: Mapping[str, Any]) -> tuple[ParsedFile, ...]:
    """Build parsed files from the ``files`` list of an ingest payload.

    Args:
        payload: Operation payload with a ``files`` list of
            ``{name, headers, rows}`` objects.

    Returns:
        Parsed files in payload order.

    Raises:
        MissingParameterError: If ``files`` or a file field is absent.
        InvalidPayloadError: If a field has the wrong type.
    """
    raw_files = payload.get("files")
    if raw_files is None:
        raise MissingParameterError("Missing required parameter 'files'.")
    file_rows = _expect_list(raw_files, "files")
    return tuple(_parsed_file(raw_file, index) for index, raw_file in enumerate(file_rows))


def allotment_document_from_payload(payload: Mapping[str, Any]) -> AllotmentDocument:
    """Build an allotment document from a save payload."""
    saved_at = payload.get("saved_at")
    if saved_at is not None and not isinstance(saved_at, str):
        saved_at = str(saved_at)
    return AllotmentDocument(
        saved_at=saved_at,
        headers=payload.get("headers", []),
        rows=payload.get("rows", []),
    )


def _parsed_file(raw_file: object, index: int) -> ParsedFile:
    context = f"files[{index}]"
    file_mapping = expect_mapping(raw_file, context)
    name = required_value(file_mapping, "name")
    if not isinstance(name, str):
        raise InvalidPayloadError(f"Invalid {context}: 'name' must be a string.")
    headers = _expect_list(file_mapping.get("headers", []), f"{context}.headers")
    if not all(isinstance(header, str) for header in headers):
        raise InvalidPayloadError(f"Invalid {context}: every header must be a string.")
    raw_rows = _expect_list(file_mapping.get("rows", []), f"{context}.rows")
    rows = [
        expect_mapping(row, f"{context}.rows[{row_index}]")
        for row_index, row in enumerate(raw_rows)
    ]
    return ParsedFile(name=name, headers=tuple(headers), rows=tuple(rows))


def _expect_list(value: object, context: str) -> Sequence[Any]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise InvalidPayloadError(f"Invalid {context}: expected a list, got {type(value).__name__}.")
