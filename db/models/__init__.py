"""
Model package exports.

Import all SQLAlchemy models here so every table is registered on
Base.metadata before the store resolves tables by name.
"""

from db.models.challenges import (
    Challenge,
    ChallengeCategory,
    ChallengeCategoryTranslation,
    ChallengeTranslation,
)
from db.models.daily_tips import DailyTip, DailyTipTranslation
from db.models.deep_talks import (
    DeepTalk,
    DeepTalkCategory,
    DeepTalkCategoryTranslation,
    DeepTalkQuestion,
    DeepTalkTranslation,
)

__all__ = [
    "ChallengeCategory",
    "ChallengeCategoryTranslation",
    "Challenge",
    "ChallengeTranslation",
    "DailyTip",
    "DailyTipTranslation",
    "DeepTalkCategory",
    "DeepTalkCategoryTranslation",
    "DeepTalk",
    "DeepTalkTranslation",
    "DeepTalkQuestion",
]
