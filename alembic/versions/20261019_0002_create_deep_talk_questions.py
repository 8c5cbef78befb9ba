"""create deep talk questions table

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 15:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "deep_talk_questions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("deep_talk_id", sa.String(length=64), nullable=False),
        sa.Column("language_code", sa.String(length=8), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(length=64), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["deep_talk_id"], ["deep_talks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "deep_talk_id",
            "sort_order",
            "language_code",
            name="uq_deep_talk_questions_position_language",
        ),
    )
    op.create_index(
        "ix_deep_talk_questions_deep_talk_sort",
        "deep_talk_questions",
        ["deep_talk_id", "sort_order"],
    )


def downgrade() -> None:
    op.drop_index("ix_deep_talk_questions_deep_talk_sort", table_name="deep_talk_questions")
    op.drop_table("deep_talk_questions")
