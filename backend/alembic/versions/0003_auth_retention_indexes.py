"""auth retention indexes

Revision ID: 0003_auth_retention_indexes
Revises: 0002_auth_codes_and_sessions
Create Date: 2026-09-10
"""

from alembic import op


revision = "0003_auth_retention_indexes"
down_revision = "0002_auth_codes_and_sessions"
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_auth_codes_created_at
        ON auth_codes (created_at)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_sessions_created_at
        ON sessions (created_at)
    """)


def downgrade():
    op.execute("DROP INDEX IF EXISTS ix_sessions_created_at")
    op.execute("DROP INDEX IF EXISTS ix_auth_codes_created_at")
