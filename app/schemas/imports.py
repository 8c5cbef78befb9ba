"""
app/schemas/imports.py

Response schemas for bulk import endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImportFailureResponse(BaseModel):
    """
    API response model for one rejected or failed import row.
    """

    line_number: int = Field(..., ge=1)
    message: str


class ImportOutcomeResponse(BaseModel):
    """
    API response model for a bulk import run.
    """

    attempted: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    success: bool
    failures: list[ImportFailureResponse] = Field(default_factory=list)
    created_ids: list[str] = Field(default_factory=list)
