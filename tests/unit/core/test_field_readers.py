"""Unit tests for field readers shared by run-spec steps and payloads."""

from __future__ import annotations

import pytest

from api.payloads import optional_string as payload_optional_string
from core.errors import InvalidPayloadError, RunSpecError
from core.field_readers import read_optional_bool, read_optional_string
from core.run_spec_fields import optional_bool as step_optional_bool
from core.run_spec_fields import optional_string as step_optional_string


def test_read_optional_string_raises_callers_error_type() -> None:
    with pytest.raises(InvalidPayloadError, match="Parameter 'table_name'"):
        read_optional_string(
            {"table_name": 3},
            "table_name",
            error_type=InvalidPayloadError,
            label="Parameter",
            strip=False,
        )
    with pytest.raises(RunSpecError, match="Run-spec field 'table'"):
        read_optional_string(
            {"table": 3}, "table", error_type=RunSpecError, label="Run-spec field", strip=True
        )


def test_read_optional_string_strip_treats_blank_as_absent() -> None:
    kwargs = {"error_type": RunSpecError, "label": "Run-spec field"}

    assert read_optional_string({"name": "  plan "}, "name", strip=True, **kwargs) == "plan"
    assert read_optional_string({"name": "   "}, "name", strip=True, **kwargs) is None
    assert read_optional_string({"name": " plan "}, "name", strip=False, **kwargs) == " plan "


def test_read_optional_bool_default_and_wrong_type() -> None:
    assert read_optional_bool({}, "flag", False, error_type=RunSpecError, label="Field") is False
    with pytest.raises(RunSpecError, match="true or false"):
        read_optional_bool({"flag": 1}, "flag", False, error_type=RunSpecError, label="Field")


def test_step_and_payload_readers_share_checks_with_own_errors() -> None:
    """Run-spec readers trim values; payload readers keep them verbatim."""
    assert step_optional_string({"domain": " exam "}, "domain") == "exam"
    assert payload_optional_string({"domain": " exam "}, "domain") == " exam "
    with pytest.raises(RunSpecError):
        step_optional_bool({"include_hidden": "no"}, "include_hidden", True)
    with pytest.raises(InvalidPayloadError):
        payload_optional_string({"domain": ["exam"]}, "domain")
