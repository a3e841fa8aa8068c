from datetime import datetime
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from labshare.db.base import Base

class AuthCode(Base):
    __tablename__ = "auth_codes"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    student_id: Mapped[UUID] = mapped_column(sa.Uuid, sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    code_hash: Mapped[str] = mapped_column(sa.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    used: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False, server_default=sa.false())

    __table_args__ = (sa.Index("ix_auth_codes_created_at", "created_at"),)


# Newest-first per student, matching the verification and rate-limit queries
sa.Index("ix_auth_codes_student_created", AuthCode.student_id, AuthCode.created_at.desc())
