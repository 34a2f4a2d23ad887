"""Structured logging configuration.

This module initializes structlog on top of the standard logging tree
so every store, ingest and dispatch event renders as one JSON line.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_ROOT_LOGGER_NAME = "csvdesk"
_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured JSON output.
    """
    _configure_once()
    return structlog.get_logger(f"{_ROOT_LOGGER_NAME}.{name}")


def set_log_level(level: int) -> None:
    """Change the level of every csvdesk logger.

    Args:
        level: Standard logging level, e.g. ``logging.WARNING``.
    """
    _configure_once()
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(level)


def _configure_once() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root_logger.handlers:
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.INFO)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


class _StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever ``sys.stderr`` is at emit time.

    ``stream`` is read-only; the target cannot be swapped with ``setStream``.
    """

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property  # type: ignore[override]
    def stream(self) -> Any:
        return sys.stderr
