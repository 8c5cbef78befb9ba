"""
db/models/challenges.py

Challenge categories, challenges, and their per-language translations.

Deleting a category cascades to its translations, its challenges, and the
challenges' translations. The cascade lives on the foreign keys so it holds
for any client of the store, not only for ORM sessions.
"""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, JSONType, RecordIdMixin, TimestampMixin


class ChallengeCategory(Base, RecordIdMixin, TimestampMixin):
    __tablename__ = "challenge_categories"

    game_mode_id: Mapped[str] = mapped_column(String(64), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    text_color: Mapped[str] = mapped_column(String(16), nullable=False, default="#FFFFFF")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_players: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    max_players: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    route: Mapped[str | None] = mapped_column(String(255), nullable=True)
    age_rating: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default="ALL",
        comment="ALL, TEEN or ADULT",
    )
    gradient_colors: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)

    translations: Mapped[list["ChallengeCategoryTranslation"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    challenges: Mapped[list["Challenge"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_challenge_categories_game_mode_id", "game_mode_id"),
        Index("ix_challenge_categories_sort_order", "sort_order"),
    )


class ChallengeCategoryTranslation(Base, RecordIdMixin):
    __tablename__ = "challenge_category_translations"

    challenge_category_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("challenge_categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)

    category: Mapped[ChallengeCategory] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint(
            "challenge_category_id",
            "language_code",
            name="uq_challenge_category_translations_parent_language",
        ),
    )


class Challenge(Base, RecordIdMixin, TimestampMixin):
    __tablename__ = "challenges"

    challenge_category_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("challenge_categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)

    category: Mapped[ChallengeCategory] = relationship(back_populates="challenges")
    translations: Mapped[list["ChallengeTranslation"]] = relationship(
        back_populates="challenge",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_challenges_challenge_category_id", "challenge_category_id"),)


class ChallengeTranslation(Base, RecordIdMixin):
    __tablename__ = "challenge_translations"

    challenge_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    challenge: Mapped[Challenge] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint(
            "challenge_id",
            "language_code",
            name="uq_challenge_translations_parent_language",
        ),
    )
