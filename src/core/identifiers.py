"""Identifier sanitizing and validation.

Table and column names arrive from file names and CSV headers, so they are
untrusted. Names are either mapped onto ``[A-Za-z0-9_]`` by ``sanitize`` or
checked by ``is_valid_identifier`` before they are interpolated into SQL.
Values never go through here; they always travel as bound parameters.
"""

from __future__ import annotations

import re

from core.errors import InvalidIdentifierError

_UNSAFE_CHARACTERS = re.compile(r"[^A-Za-z0-9_]")
_VALID_IDENTIFIER = re.compile(r"[A-Za-z0-9_]+")


def sanitize(name: str) -> str:
    """Map an arbitrary name onto a safe storage identifier.

    Every character outside ``[A-Za-z0-9_]`` becomes ``_``. Distinct raw
    names may collide after sanitizing.

    Args:
        name: Raw file or header name.

    Returns:
        Sanitized identifier, possibly empty.
    """
    return _UNSAFE_CHARACTERS.sub("_", str(name))


def is_valid_identifier(name: object) -> bool:
    """Return whether a name may be interpolated into SQL as-is."""
    if not isinstance(name, str):
        return False
    if " " in name or ";" in name:
        return False
    return _VALID_IDENTIFIER.fullmatch(name) is not None


def require_identifier(name: object, kind: str = "table") -> str:
    """Validate a name and return it.

    Args:
        name: Candidate identifier.
        kind: Human-readable identifier role for the error message.

    Returns:
        The unchanged name.

    Raises:
        InvalidIdentifierError: If the name is not purely ``[A-Za-z0-9_]``.
    """
    if not is_valid_identifier(name):
        raise InvalidIdentifierError(
            f"Invalid {kind} name {name!r}: use only letters, digits and underscores."
        )
    return str(name)


def quote_identifier(name: str) -> str:
    """Quote a sanitized or validated identifier for SQL text."""
    return f'"{name}"'
