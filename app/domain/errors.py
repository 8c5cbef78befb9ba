"""
app/domain/errors.py

Error taxonomy for the ingestion and consistency core.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ContentCoreError(Exception):
    """Base class for every error raised by the content core."""


class ValidationError(ContentCoreError):
    """
    Caller-correctable input defect detected before any write.
    """

    def __init__(self, message: str, *, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.problems = list(problems or [])

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "problems": self.problems}


class WritePhase(str, Enum):
    PREPARE = "prepare"
    INSERT_PARENT = "insert_parent"
    INSERT_TRANSLATIONS = "insert_translations"
    UPDATE_PARENT = "update_parent"
    DELETE_TRANSLATIONS = "delete_translations"
    DELETE_PARENT = "delete_parent"
    INSERT_ROWS = "insert_rows"
    UPDATE_ROWS = "update_rows"
    DELETE_ROWS = "delete_rows"


class WriteError(ContentCoreError):
    """
    A store call failed after some side effects may already have happened.

    ``phase`` names the step that failed. For creates, ``compensated`` tells
    whether the parent written in the first step was removed again; ``False``
    means an orphan parent with id ``parent_id`` is left behind.
    """

    def __init__(
        self,
        message: str,
        *,
        phase: WritePhase,
        parent_id: str | None = None,
        compensated: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.phase = phase
        self.parent_id = parent_id
        self.compensated = compensated

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "phase": self.phase.value,
            "parent_id": self.parent_id,
            "compensated": self.compensated,
        }


class AggregateNotFoundError(WriteError):
    """Raised when an update or delete targets a parent that does not exist."""


class TranslationError(ContentCoreError):
    """Provider call failed or returned an unusable response."""

    def __init__(self, message: str, *, locale: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.locale = locale


class TranslationFormatError(TranslationError):
    """A batched response did not split back into the number of fields sent."""


class PreconditionError(TranslationError):
    """The source translation is not complete enough to translate from."""


class StructuralImportError(ContentCoreError):
    """
    File-level defect that prevents any row from being processed.
    """

    def __init__(self, message: str, *, missing_columns: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.missing_columns = list(missing_columns or [])

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "missing_columns": self.missing_columns}


class ReferenceNotFoundError(ContentCoreError):
    """An import row names a parent record (by id or label) that does not exist."""

    def __init__(self, message: str, *, reference: str) -> None:
        super().__init__(message)
        self.message = message
        self.reference = reference
