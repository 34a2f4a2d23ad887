"""Type-safe field parsing helpers for run-spec steps.

This module centralizes primitive parsing so run-spec loading and execution
produce consistent validation errors across CLI and SDK flows.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.errors import RunSpecError
from core.field_readers import read_optional_bool, read_optional_string

_FIELD_LABEL = "Run-spec field"


def required_string(args: Mapping[str, object], field_name: str) -> str:
    """Read a required string field from a run-spec step."""
    value = optional_string(args, field_name)
    if value is None:
        raise RunSpecError(f"Run-spec step is missing required field '{field_name}'.")
    return value


def optional_string(args: Mapping[str, object], field_name: str) -> str | None:
    """Read an optional string field from a run-spec step."""
    return read_optional_string(
        args, field_name, error_type=RunSpecError, label=_FIELD_LABEL, strip=True
    )


def optional_bool(args: Mapping[str, object], field_name: str, default_value: bool) -> bool:
    """Read an optional boolean field with fallback default."""
    return read_optional_bool(
        args, field_name, default_value, error_type=RunSpecError, label=_FIELD_LABEL
    )


def string_list(args: Mapping[str, object], field_name: str) -> tuple[str, ...]:
    """Read a field holding one string or a non-empty list of strings."""
    value = args.get(field_name)
    if isinstance(value, str):
        return (required_string(args, field_name),)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)) and value:
        if all(isinstance(item, str) and item.strip() for item in value):
            return tuple(item.strip() for item in value)
    raise RunSpecError(
        f"Run-spec field '{field_name}' must be a path or a non-empty list of paths."
    )


def optional_json_value(args: Mapping[str, object], field_name: str) -> object:
    """Read a free-form field, defaulting to an empty list."""
    value = args.get(field_name)
    return [] if value is None else value
