"""
app/schemas/content.py

Request/response schemas for aggregate and translation endpoints.

Parent and translation bodies arrive as free mappings and are checked
against the per-kind field models below before they reach the domain.
Every field is optional at this layer: the domain dataclasses own the
defaults and the required fields, the models only pin down types.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _FieldsModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


# ---------------------------------------------------------------------------
# Per-kind parent fields
# ---------------------------------------------------------------------------


class ChallengeCategoryParentFields(_FieldsModel):
    game_mode_id: str | None = None
    text_color: str | None = None
    min_players: int | None = None
    max_players: int | None = None
    gradient_colors: list[str] | None = None
    age_rating: str | None = None
    icon: str | None = None
    is_premium: bool | None = None
    is_active: bool | None = None
    sort_order: int | None = None
    route: str | None = None
    author: str | None = None


class ChallengeParentFields(_FieldsModel):
    challenge_category_id: str | None = None
    icon: str | None = None
    is_active: bool | None = None
    is_premium: bool | None = None
    author: str | None = None


class DailyTipParentFields(_FieldsModel):
    is_active: bool | None = None


class DeepTalkCategoryParentFields(_FieldsModel):
    game_mode_id: str | None = None
    label: str | None = None
    icon: str | None = None
    color: str | None = None
    route: str | None = None
    sort_order: int | None = None
    is_premium: bool | None = None
    is_active: bool | None = None


class DeepTalkParentFields(_FieldsModel):
    deep_talk_category_id: str | None = None
    icon: str | None = None
    gradient_colors: list[str] | None = None
    estimated_time: int | None = None
    is_active: bool | None = None
    sort_order: int | None = None


# ---------------------------------------------------------------------------
# Per-kind translation fields
# ---------------------------------------------------------------------------


class ChallengeCategoryTranslationFields(_FieldsModel):
    title: str | None = None
    description: str | None = None
    instructions: str | None = None
    tags: list[str] | str | None = None


class ChallengeTranslationFields(_FieldsModel):
    content: str | None = None


class DailyTipTranslationFields(_FieldsModel):
    text: str | None = None


class DeepTalkCategoryTranslationFields(_FieldsModel):
    name: str | None = None


class DeepTalkTranslationFields(_FieldsModel):
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    intensity: str | None = None


PARENT_FIELD_MODELS: dict[str, type[BaseModel]] = {
    "challenge_category": ChallengeCategoryParentFields,
    "challenge": ChallengeParentFields,
    "daily_tip": DailyTipParentFields,
    "deep_talk_category": DeepTalkCategoryParentFields,
    "deep_talk": DeepTalkParentFields,
}

TRANSLATION_FIELD_MODELS: dict[str, type[BaseModel]] = {
    "challenge_category": ChallengeCategoryTranslationFields,
    "challenge": ChallengeTranslationFields,
    "daily_tip": DailyTipTranslationFields,
    "deep_talk_category": DeepTalkCategoryTranslationFields,
    "deep_talk": DeepTalkTranslationFields,
}


# ---------------------------------------------------------------------------
# Requests and responses
# ---------------------------------------------------------------------------

class AggregateWriteRequest(BaseModel):
    """
    Parent fields plus translations keyed by locale code.
    """

    parent: dict[str, Any] = Field(default_factory=dict)
    translations: dict[str, dict[str, Any]] = Field(default_factory=dict)


class AggregateResponse(BaseModel):
    id: str
    kind: str
    parent: dict[str, Any]
    translations: dict[str, dict[str, Any]] = Field(default_factory=dict)


class AggregateCreatedResponse(BaseModel):
    id: str
    kind: str


class AggregateDeletedResponse(BaseModel):
    id: str
    kind: str
    deleted_children: int = Field(..., ge=0)


class TranslationSyncRequest(BaseModel):
    """
    Source translation to fan out, plus the current translation set to merge into.

    When ``target_locales`` is omitted every active locale other than the
    source is targeted.
    """

    source: dict[str, Any]
    source_locale: str | None = None
    target_locales: list[str] | None = None
    batch: bool = False
    existing: dict[str, dict[str, Any]] = Field(default_factory=dict)


class LocaleSyncResultResponse(BaseModel):
    locale: str
    ok: bool
    values: dict[str, str] | None = None
    error: str | None = None


class TranslationSyncResponse(BaseModel):
    results: list[LocaleSyncResultResponse] = Field(default_factory=list)
    translations: dict[str, dict[str, Any]] = Field(default_factory=dict)


class ChallengeCategoryListingResponse(AggregateResponse):
    challenge_count: int = Field(..., ge=0)


class CategoryChallengesResponse(BaseModel):
    category: AggregateResponse
    challenges: list[AggregateResponse] = Field(default_factory=list)
