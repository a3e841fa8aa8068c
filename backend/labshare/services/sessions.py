from datetime import datetime, timedelta
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import Session

from labshare.core.clock import as_utc, resolve_now
from labshare.core.config import Settings
from labshare.models.auth_session import AuthSession


def _parse_session_id(session_id: UUID | str) -> UUID | None:
    if isinstance(session_id, UUID):
        return session_id
    try:
        return UUID(str(session_id))
    except ValueError:
        return None


def create_session(db: Session, student_id: UUID, now: datetime | None = None) -> AuthSession:
    row = AuthSession(student_id=student_id, created_at=resolve_now(now), revoked=False)
    db.add(row)
    db.flush()
    return row


def get_valid_session(
    db: Session, settings: Settings, session_id: UUID | str, now: datetime | None = None
) -> AuthSession | None:
    """Return the session if it exists, is not revoked and is within max age."""
    sid = _parse_session_id(session_id)
    if sid is None:
        return None
    row = db.get(AuthSession, sid, populate_existing=True)
    if row is None or row.revoked:
        return None
    age = resolve_now(now) - as_utc(row.created_at)
    if age > settings.session_max_age:
        return None
    return row


def touch_session(db: Session, session_id: UUID, now: datetime | None = None) -> None:
    """Record when the session was last presented. Validity ignores it."""
    db.execute(
        sa.update(AuthSession).where(AuthSession.id == session_id).values(last_seen_at=resolve_now(now))
    )


def revoke_session(db: Session, session_id: UUID | str) -> bool:
    """Mark a session revoked. Unknown or already revoked ids are a no-op."""
    sid = _parse_session_id(session_id)
    if sid is None:
        return False
    result = db.execute(
        sa.update(AuthSession)
        .where(AuthSession.id == sid, AuthSession.revoked.is_(False))
        .values(revoked=True)
    )
    return result.rowcount == 1


def delete_session(db: Session, session_id: UUID | str) -> bool:
    sid = _parse_session_id(session_id)
    if sid is None:
        return False
    result = db.execute(
        sa.delete(AuthSession)
        .where(AuthSession.id == sid)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def revoke_all_student_sessions(db: Session, student_id: UUID) -> int:
    result = db.execute(
        sa.update(AuthSession)
        .where(AuthSession.student_id == student_id, AuthSession.revoked.is_(False))
        .values(revoked=True)
    )
    return result.rowcount or 0


def delete_expired_sessions(db: Session, max_age: timedelta, now: datetime | None = None) -> int:
    cutoff = resolve_now(now) - max_age
    result = db.execute(
        sa.delete(AuthSession)
        .where(AuthSession.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
