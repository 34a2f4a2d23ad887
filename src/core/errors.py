"""csvdesk exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class CsvDeskError(Exception):
    """Base exception for all csvdesk failures."""


class ConfigError(CsvDeskError):
    """Raised for invalid runtime configuration."""


class InvalidIdentifierError(CsvDeskError):
    """Raised when a table or column name fails the strict identifier check."""


class StorageError(CsvDeskError):
    """Raised when the storage engine rejects a statement or a store cannot open."""


class MissingParameterError(CsvDeskError):
    """Raised when a required operation argument is absent."""


class InvalidPayloadError(CsvDeskError):
    """Raised when an operation argument has the wrong shape or type."""


class CorruptDocumentError(CsvDeskError):
    """Raised when a stored JSON document cannot be decoded."""


class NotFoundError(CsvDeskError):
    """Raised when a referenced table or store does not exist."""


class CsvReadError(CsvDeskError):
    """Raised for CSV source reading failures."""


class RunSpecError(CsvDeskError):
    """Raised for invalid or unsupported batch run-spec files."""
