"""Create users and streaks tables

Revision ID: v1
Revises:
Create Date: 2025-01-06 00:00:00

Users hold the persisted XP ledger; streaks hold one row per streak, with a
NULL end_date marking the active one.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v1'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),

        # XP ledger
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_version", sa.Integer(), nullable=True),

        sa.Column("target_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("timezone", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Create streaks table
    op.create_table(
        "streaks",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("relapse_reason", sa.String(100), nullable=True),
        sa.Column("relapse_notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_streaks_user_id"), "streaks", ["user_id"], unique=False)
    op.create_index("ix_streaks_user_id_start_date", "streaks", ["user_id", "start_date"], unique=False)
    # At most one open streak per user
    op.create_index(
        "uq_streaks_one_open_per_user",
        "streaks",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("end_date IS NULL"),
        sqlite_where=sa.text("end_date IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_streaks_one_open_per_user", table_name="streaks")
    op.drop_index("ix_streaks_user_id_start_date", table_name="streaks")
    op.drop_index(op.f("ix_streaks_user_id"), table_name="streaks")
    op.drop_table("streaks")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
