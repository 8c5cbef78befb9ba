"""
app/domain/bulk_import.py

Value objects shared by the bulk importer, its profiles, and the HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ImportState(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    REJECTED = "rejected"
    VALIDATING = "validating"
    WRITING = "writing"
    DONE = "done"


@dataclass(frozen=True)
class ImportRow:
    """
    One data line of an import file, keyed by canonical column name.

    ``line_number`` is the 1-based physical line in the uploaded file.
    """

    line_number: int
    values: dict[str, str] = field(default_factory=dict)

    def get(self, column: str) -> str:
        return self.values.get(column, "")


@dataclass(frozen=True)
class ImportFailure:
    line_number: int
    message: str

    def describe(self) -> str:
        return f"Fila {self.line_number}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"line_number": self.line_number, "message": self.message}


@dataclass(frozen=True)
class ImportPlan:
    """
    Parsed and validated file, ready to be written.

    ``rows`` only holds rows that passed validation; rejected rows are in
    ``failures``. ``total_rows`` counts every data line.
    """

    profile_name: str
    columns: tuple[str, ...]
    rows: tuple[ImportRow, ...]
    failures: tuple[ImportFailure, ...]
    total_rows: int


@dataclass(frozen=True)
class RowOutcome:
    """
    Result of writing one planned row; ``current``/``total`` report progress.
    """

    line_number: int
    current: int
    total: int
    parent_id: str | None = None
    failure: ImportFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class ImportOutcome:
    """
    End-of-run import report.
    """

    attempted: int
    succeeded: int
    failures: list[ImportFailure] = field(default_factory=list)
    created_ids: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.succeeded > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "success": self.success,
            "failures": [failure.to_dict() for failure in self.failures],
            "created_ids": list(self.created_ids),
        }
