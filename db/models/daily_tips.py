"""
db/models/daily_tips.py

Daily tips shown once per day in the mobile app.
"""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, RecordIdMixin, TimestampMixin


class DailyTip(Base, RecordIdMixin, TimestampMixin):
    __tablename__ = "daily_tips"

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    translations: Mapped[list["DailyTipTranslation"]] = relationship(
        back_populates="tip",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DailyTipTranslation(Base, RecordIdMixin, TimestampMixin):
    __tablename__ = "daily_tip_translations"

    tip_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("daily_tips.id", ondelete="CASCADE"),
        nullable=False,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    tip: Mapped[DailyTip] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint("tip_id", "language_code", name="uq_daily_tip_translations_parent_language"),
    )
