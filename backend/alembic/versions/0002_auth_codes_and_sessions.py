"""auth codes and sessions

Revision ID: 0002_auth_codes_and_sessions
Revises: 0001_students
Create Date: 2026-09-03
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_auth_codes_and_sessions"
down_revision = "0001_students"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "auth_codes",
        sa.Column("id", sa.Uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("student_id", sa.Uuid, sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("code_hash", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("used", sa.Boolean, nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_auth_codes_student_created", "auth_codes", ["student_id", sa.text("created_at DESC")])

    op.create_table(
        "sessions",
        sa.Column("id", sa.Uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("student_id", sa.Uuid, sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("revoked", sa.Boolean, nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_sessions_student_created", "sessions", ["student_id", sa.text("created_at DESC")])


def downgrade():
    op.drop_index("ix_sessions_student_created", table_name="sessions")
    op.drop_table("sessions")

    op.drop_index("ix_auth_codes_student_created", table_name="auth_codes")
    op.drop_table("auth_codes")
