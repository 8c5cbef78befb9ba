"""
Store-layer exceptions.

Every failure of a single-table store call is reported as a StoreError; the
underlying SQLAlchemy exception is kept as ``__cause__``.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for content store failures."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


class RecordNotFoundError(StoreError):
    """Raised when an update or delete targets a row that does not exist."""


class UnknownTableError(StoreError):
    """Raised when a call names a table that is not registered on the metadata."""
