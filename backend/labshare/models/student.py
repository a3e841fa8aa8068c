from datetime import datetime
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from labshare.db.base import Base

class Student(Base):
    """Identity record; registration and profile editing live outside the auth core."""

    __tablename__ = "students"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(sa.Text, nullable=False)
    name: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp())


# Identity lookup is case-insensitive
sa.Index("ux_students_email_lower", sa.func.lower(Student.email), unique=True)
