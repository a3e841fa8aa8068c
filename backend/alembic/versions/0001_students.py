"""students identity table

Revision ID: 0001_students
Revises: 
Create Date: 2026-09-02

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_students"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    op.create_table(
        "students",
        sa.Column("id", sa.Uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.execute("CREATE UNIQUE INDEX ux_students_email_lower ON students (lower(email))")


def downgrade():
    op.execute("DROP INDEX IF EXISTS ux_students_email_lower")
    op.drop_table("students")
