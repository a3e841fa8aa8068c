from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import Session

from labshare.models.student import Student


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_student_by_email(db: Session, email: str) -> Student | None:
    value = normalize_email(email)
    if not value:
        return None
    return db.scalars(
        sa.select(Student).where(sa.func.lower(Student.email) == value).limit(1)
    ).first()


def get_student(db: Session, student_id: UUID) -> Student | None:
    return db.get(Student, student_id)
