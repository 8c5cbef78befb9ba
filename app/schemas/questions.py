"""
app/schemas/questions.py

Request/response schemas for deep talk question endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class QuestionUpdateRequest(BaseModel):
    """
    Question wording keyed by locale code plus the values shared by every locale.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    questions: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True
    icon: str | None = None


class QuestionCreateRequest(QuestionUpdateRequest):
    """
    ``make_room`` moves questions at or after ``sort_order`` down by one first.
    """

    sort_order: int = Field(0, ge=0)
    make_room: bool = True


class QuestionActiveRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    is_active: bool


class QuestionSlotResponse(BaseModel):
    deep_talk_id: str
    sort_order: int
    is_active: bool
    icon: str | None = None
    questions: dict[str, str] = Field(default_factory=dict)
    row_ids: dict[str, str] = Field(default_factory=dict)


class QuestionCreatedResponse(BaseModel):
    deep_talk_id: str
    sort_order: int
    row_ids: list[str] = Field(default_factory=list)


class QuestionRowsChangedResponse(BaseModel):
    deep_talk_id: str
    sort_order: int
    rows: int = Field(..., ge=0)
