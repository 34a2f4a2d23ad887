"""Runtime configuration model for csvdesk.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_BUSY_TIMEOUT_SECONDS, DEFAULT_DATA_ROOT
from core.errors import ConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class CsvDeskConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Directory holding the four SQLite store files.
        busy_timeout_seconds: SQLite busy timeout applied to every connection.
        echo_sql: Whether SQLAlchemy should log every emitted statement.
    """

    data_root: Path
    busy_timeout_seconds: float
    echo_sql: bool

    @classmethod
    def from_env(cls) -> "CsvDeskConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("CSVDESK_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        timeout_value = os.getenv("CSVDESK_BUSY_TIMEOUT", str(DEFAULT_BUSY_TIMEOUT_SECONDS))
        echo_value = os.getenv("CSVDESK_ECHO_SQL", "false")
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            busy_timeout_seconds=_parse_busy_timeout(timeout_value),
            echo_sql=_parse_flag("CSVDESK_ECHO_SQL", echo_value),
        )


def _parse_busy_timeout(raw_value: str) -> float:
    """Parse the busy timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        ConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise ConfigError(
            "Invalid CSVDESK_BUSY_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set CSVDESK_BUSY_TIMEOUT to a numeric value."
        ) from error
    if timeout <= 0:
        raise ConfigError(
            f"Invalid CSVDESK_BUSY_TIMEOUT value: expected a positive number, got {timeout}."
        )
    return timeout


def _parse_flag(variable_name: str, raw_value: str) -> bool:
    normalized_value = raw_value.strip().lower()
    if normalized_value in _TRUE_VALUES:
        return True
    if normalized_value in _FALSE_VALUES:
        return False
    raise ConfigError(
        f"Invalid {variable_name} value: expected true/false, got '{raw_value}'."
    )
