"""create content catalog tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(length=64), nullable=False)


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _parent_fk(column: str, parent_table: str) -> list:
    return [
        sa.Column(column, sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint([column], [f"{parent_table}.id"], ondelete="CASCADE"),
    ]


def upgrade() -> None:
    op.create_table(
        "challenge_categories",
        _id_column(),
        sa.Column("game_mode_id", sa.String(length=64), nullable=False),
        sa.Column("icon", sa.String(length=64), nullable=True),
        sa.Column("text_color", sa.String(length=16), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("min_players", sa.Integer(), nullable=False),
        sa.Column("max_players", sa.Integer(), nullable=False),
        sa.Column("route", sa.String(length=255), nullable=True),
        sa.Column("age_rating", sa.String(length=8), nullable=False, comment="ALL, TEEN or ADULT"),
        sa.Column("gradient_colors", JSON_TYPE, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_challenge_categories_game_mode_id", "challenge_categories", ["game_mode_id"])
    op.create_index("ix_challenge_categories_sort_order", "challenge_categories", ["sort_order"])

    op.create_table(
        "challenge_category_translations",
        _id_column(),
        *_parent_fk("challenge_category_id", "challenge_categories"),
        sa.Column("language_code", sa.String(length=8), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("tags", JSON_TYPE, nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "challenge_category_id",
            "language_code",
            name="uq_challenge_category_translations_parent_language",
        ),
    )

    op.create_table(
        "challenges",
        _id_column(),
        *_parent_fk("challenge_category_id", "challenge_categories"),
        sa.Column("icon", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_challenges_challenge_category_id", "challenges", ["challenge_category_id"])

    op.create_table(
        "challenge_translations",
        _id_column(),
        *_parent_fk("challenge_id", "challenges"),
        sa.Column("language_code", sa.String(length=8), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("challenge_id", "language_code", name="uq_challenge_translations_parent_language"),
    )

    op.create_table(
        "daily_tips",
        _id_column(),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "daily_tip_translations",
        _id_column(),
        *_parent_fk("tip_id", "daily_tips"),
        sa.Column("language_code", sa.String(length=8), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tip_id", "language_code", name="uq_daily_tip_translations_parent_language"),
    )

    op.create_table(
        "deep_talk_categories",
        _id_column(),
        sa.Column("game_mode_id", sa.String(length=64), nullable=False),
        sa.Column(
            "label",
            sa.String(length=120),
            nullable=True,
            comment="Stable slug used by bulk imports to reference the category",
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("icon", sa.String(length=64), nullable=True),
        sa.Column("color", sa.String(length=16), nullable=True),
        sa.Column("route", sa.String(length=255), nullable=True),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_deep_talk_categories_game_mode_sort",
        "deep_talk_categories",
        ["game_mode_id", "sort_order"],
    )
    op.create_index("ix_deep_talk_categories_label", "deep_talk_categories", ["label"])

    op.create_table(
        "deep_talk_categories_translations",
        _id_column(),
        *_parent_fk("deep_talk_category_id", "deep_talk_categories"),
        sa.Column("language_code", sa.String(length=8), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "deep_talk_category_id",
            "language_code",
            name="uq_deep_talk_categories_translations_parent_language",
        ),
    )

    op.create_table(
        "deep_talks",
        _id_column(),
        *_parent_fk("deep_talk_category_id", "deep_talk_categories"),
        sa.Column("icon", sa.String(length=64), nullable=True),
        sa.Column("gradient_colors", JSON_TYPE, nullable=True),
        sa.Column("estimated_time", sa.Integer(), nullable=True, comment="Minutes"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_deep_talks_category_sort", "deep_talks", ["deep_talk_category_id", "sort_order"])

    op.create_table(
        "deep_talk_translations",
        _id_column(),
        *_parent_fk("deep_talk_id", "deep_talks"),
        sa.Column("language_code", sa.String(length=8), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("intensity", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("deep_talk_id", "language_code", name="uq_deep_talk_translations_parent_language"),
    )


def downgrade() -> None:
    op.drop_table("deep_talk_translations")
    op.drop_index("ix_deep_talks_category_sort", table_name="deep_talks")
    op.drop_table("deep_talks")
    op.drop_table("deep_talk_categories_translations")
    op.drop_index("ix_deep_talk_categories_label", table_name="deep_talk_categories")
    op.drop_index("ix_deep_talk_categories_game_mode_sort", table_name="deep_talk_categories")
    op.drop_table("deep_talk_categories")
    op.drop_table("daily_tip_translations")
    op.drop_table("daily_tips")
    op.drop_table("challenge_translations")
    op.drop_index("ix_challenges_challenge_category_id", table_name="challenges")
    op.drop_table("challenges")
    op.drop_table("challenge_category_translations")
    op.drop_index("ix_challenge_categories_sort_order", table_name="challenge_categories")
    op.drop_index("ix_challenge_categories_game_mode_id", table_name="challenge_categories")
    op.drop_table("challenge_categories")
