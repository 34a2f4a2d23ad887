"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from core.logging_config import get_logger, set_log_level


def test_get_logger_renders_one_json_line_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("tests.logging")

    logger.info("probe_event", table="results", rows_inserted=2)
    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])

    assert payload["event"] == "probe_event"
    assert payload["logger"] == "csvdesk.tests.logging"
    assert (payload["level"], payload["table"], payload["rows_inserted"]) == ("info", "results", 2)
    assert "timestamp" in payload


def test_set_log_level_filters_lower_levels(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("tests.level")
    set_log_level(logging.WARNING)
    try:
        logger.info("quiet_event")
        logger.warning("loud_event")
    finally:
        set_log_level(logging.INFO)

    err = capsys.readouterr().err
    assert "quiet_event" not in err and "loud_event" in err


def test_log_handler_stream_follows_stderr_and_is_read_only(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """The handler should write to the current stderr and refuse a new stream."""
    get_logger("tests.stream")
    handler = logging.getLogger("csvdesk").handlers[0]

    assert handler.stream is sys.stderr
    with pytest.raises(AttributeError):
        handler.setStream(sys.stdout)
    assert handler.stream is sys.stderr
