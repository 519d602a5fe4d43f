"""Custom exception classes for transaction ingestion.

Each exception maps to an error code defined in errors.py. Only fatal
(precondition) failures and collaborator failures are raised out of the
services; row-level problems are collected as row errors instead.
"""

from typing import Any


class IngestionError(Exception):
    """Base exception for all ingestion errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "UPLOAD_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    default_status: int = 500

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        self.error_code = error_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(error_code)


class InvalidFormatError(IngestionError):
    """Raised when the uploaded content can't be decoded as CSV (UPLOAD_001)
    or is empty (UPLOAD_002)."""

    default_status = 400


class MissingHeaderError(IngestionError):
    """Raised when the header row lacks a required column (UPLOAD_003)."""

    default_status = 400


class UnsupportedBankError(IngestionError):
    """Raised when the bank is unknown (BANK_001) or can't import CSV (BANK_002)."""

    default_status = 400


class PersistenceError(IngestionError):
    """Raised when the store rejects or fails a write (DB_001)."""

    default_status = 500


class NotFoundError(IngestionError):
    default_status = 404


class BankAPIError(IngestionError):
    """Raised when the external banking API fails or returns an unexpected response."""

    default_status = 502


class AuthorizationError(IngestionError):
    default_status = 401


class InvalidStateError(IngestionError):
    default_status = 400


class FieldParseError(ValueError):
    """Raised by field handlers for one unparseable cell.

    Never escapes a parser: it becomes a row error.
    """
