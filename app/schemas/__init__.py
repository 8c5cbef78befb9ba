"""
API schema package.
"""

from app.schemas.content import (
    AggregateCreatedResponse,
    AggregateDeletedResponse,
    AggregateResponse,
    AggregateWriteRequest,
    CategoryChallengesResponse,
    ChallengeCategoryListingResponse,
    LocaleSyncResultResponse,
    TranslationSyncRequest,
    TranslationSyncResponse,
)
from app.schemas.imports import ImportFailureResponse, ImportOutcomeResponse
from app.schemas.questions import (
    QuestionActiveRequest,
    QuestionCreatedResponse,
    QuestionCreateRequest,
    QuestionRowsChangedResponse,
    QuestionSlotResponse,
    QuestionUpdateRequest,
)

__all__ = [
    "AggregateCreatedResponse",
    "AggregateDeletedResponse",
    "AggregateResponse",
    "AggregateWriteRequest",
    "CategoryChallengesResponse",
    "ChallengeCategoryListingResponse",
    "ImportFailureResponse",
    "ImportOutcomeResponse",
    "LocaleSyncResultResponse",
    "QuestionActiveRequest",
    "QuestionCreatedResponse",
    "QuestionCreateRequest",
    "QuestionRowsChangedResponse",
    "QuestionSlotResponse",
    "QuestionUpdateRequest",
    "TranslationSyncRequest",
    "TranslationSyncResponse",
]
