"""
db/models/deep_talks.py

Deep talk categories ("filters"), deep talks, their translations, and the
questions asked inside a deep talk.
"""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, JSONType, RecordIdMixin, TimestampMixin


class DeepTalkCategory(Base, RecordIdMixin, TimestampMixin):
    __tablename__ = "deep_talk_categories"

    game_mode_id: Mapped[str] = mapped_column(String(64), nullable=False)
    label: Mapped[str | None] = mapped_column(
        String(120),
        nullable=True,
        comment="Stable slug used by bulk imports to reference the category",
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    route: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    translations: Mapped[list["DeepTalkCategoryTranslation"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    deep_talks: Mapped[list["DeepTalk"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_deep_talk_categories_game_mode_sort", "game_mode_id", "sort_order"),
        Index("ix_deep_talk_categories_label", "label"),
    )


class DeepTalkCategoryTranslation(Base, RecordIdMixin):
    __tablename__ = "deep_talk_categories_translations"

    deep_talk_category_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("deep_talk_categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[DeepTalkCategory] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint(
            "deep_talk_category_id",
            "language_code",
            name="uq_deep_talk_categories_translations_parent_language",
        ),
    )


class DeepTalk(Base, RecordIdMixin, TimestampMixin):
    __tablename__ = "deep_talks"

    deep_talk_category_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("deep_talk_categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    gradient_colors: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    estimated_time: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Minutes",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category: Mapped[DeepTalkCategory] = relationship(back_populates="deep_talks")
    translations: Mapped[list["DeepTalkTranslation"]] = relationship(
        back_populates="deep_talk",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    questions: Mapped[list["DeepTalkQuestion"]] = relationship(
        back_populates="deep_talk",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_deep_talks_category_sort", "deep_talk_category_id", "sort_order"),)


class DeepTalkTranslation(Base, RecordIdMixin):
    __tablename__ = "deep_talk_translations"

    deep_talk_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("deep_talks.id", ondelete="CASCADE"),
        nullable=False,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    subtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    intensity: Mapped[str | None] = mapped_column(String(64), nullable=True)

    deep_talk: Mapped[DeepTalk] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint(
            "deep_talk_id",
            "language_code",
            name="uq_deep_talk_translations_parent_language",
        ),
    )


class DeepTalkQuestion(Base, RecordIdMixin, TimestampMixin):
    """
    One locale's wording of a question; all locales of one question share
    ``(deep_talk_id, sort_order)``.
    """

    __tablename__ = "deep_talk_questions"

    deep_talk_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("deep_talks.id", ondelete="CASCADE"),
        nullable=False,
    )
    language_code: Mapped[str] = mapped_column(String(8), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    deep_talk: Mapped[DeepTalk] = relationship(back_populates="questions")

    __table_args__ = (
        UniqueConstraint(
            "deep_talk_id",
            "sort_order",
            "language_code",
            name="uq_deep_talk_questions_position_language",
        ),
        Index("ix_deep_talk_questions_deep_talk_sort", "deep_talk_id", "sort_order"),
    )
