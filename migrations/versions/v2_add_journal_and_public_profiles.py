"""Add journal_entries and public_profiles tables

Revision ID: v2
Revises: v1
Create Date: 2025-02-10 00:00:00

Daily mood journal and the opt-in public profile snapshot
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v2'
down_revision = 'v1'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create journal_entries table
    op.create_table(
        "journal_entries",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("mood", sa.Integer(), nullable=False),
        sa.Column("note", sa.Text(), nullable=False),
        sa.CheckConstraint("mood BETWEEN 1 AND 5", name="ck_journal_entries_mood_range"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_journal_entries_user_id"), "journal_entries", ["user_id"], unique=False)
    op.create_index(op.f("ix_journal_entries_date"), "journal_entries", ["date"], unique=False)

    # Create public_profiles table
    op.create_table(
        "public_profiles",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_streak_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_streak_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("badges", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("success_rate", sa.Integer(), nullable=False, server_default="0"),

        # Visibility settings
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("show_name", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("show_level", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("show_active_streak", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("show_badges", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("show_stats", sa.Boolean(), nullable=False, server_default="false"),

        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("public_profiles")
    op.drop_index(op.f("ix_journal_entries_date"), table_name="journal_entries")
    op.drop_index(op.f("ix_journal_entries_user_id"), table_name="journal_entries")
    op.drop_table("journal_entries")
