"""Add timezone to streaks

Revision ID: v3
Revises: v2
Create Date: 2025-03-02 00:00:00

Records the zone a streak's days were credited in
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v3'
down_revision = 'v2'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('streaks', sa.Column('timezone', sa.String(length=64), nullable=True))

    # Existing closed streaks were credited in the owner's current zone
    op.execute(
        """
        UPDATE streaks
        SET timezone = users.timezone
        FROM users
        WHERE streaks.user_id = users.id AND streaks.end_date IS NOT NULL
        """
    )


def downgrade() -> None:
    op.drop_column('streaks', 'timezone')
