"""Primitive field readers shared by run-spec steps and operation payloads.

Both callers read loosely typed mappings (parsed YAML or decoded JSON) and
differ only in the error type and wording they report, so the checks live
here once and the callers pass their own error type and field label.
"""

from __future__ import annotations

from typing import Mapping

from core.errors import CsvDeskError


def read_optional_string(
    mapping: Mapping[str, object],
    field_name: str,
    *,
    error_type: type[CsvDeskError],
    label: str,
    strip: bool,
) -> str | None:
    """Read a string field that may be absent.

    Args:
        mapping: Source mapping.
        field_name: Key to read.
        error_type: Error raised when the value is not a string.
        label: Noun used in the error message, e.g. ``Parameter``.
        strip: Trim whitespace and treat blank strings as absent.

    Returns:
        The string value, or None when absent.

    Raises:
        CsvDeskError: ``error_type`` when the value has the wrong type.
    """
    value = mapping.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise error_type(f"{label} '{field_name}' must be a string when provided.")
    if not strip:
        return value
    stripped = value.strip()
    return stripped if stripped else None


def read_optional_bool(
    mapping: Mapping[str, object],
    field_name: str,
    default_value: bool,
    *,
    error_type: type[CsvDeskError],
    label: str,
) -> bool:
    """Read a boolean field, falling back to ``default_value`` when absent."""
    value = mapping.get(field_name)
    if value is None:
        return default_value
    if isinstance(value, bool):
        return value
    raise error_type(f"{label} '{field_name}' must be true or false.")
