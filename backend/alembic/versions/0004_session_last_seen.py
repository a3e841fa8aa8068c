"""session last seen

Revision ID: 0004_session_last_seen
Revises: 0003_auth_retention_indexes
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "0004_session_last_seen"
down_revision = "0003_auth_retention_indexes"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column("sessions", sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True))


def downgrade():
    op.drop_column("sessions", "last_seen_at")
