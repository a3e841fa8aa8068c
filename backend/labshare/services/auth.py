"""Login flow: request a code, exchange it for a session token, authenticate
requests with that token, and log out.

A token proves possession of a session id; the session row still has to be
valid, which is what lets logout take effect before the token expires.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from labshare.core.config import Settings
from labshare.core.logging import get_logger
from labshare.core.security import create_session_token, decode_session_token
from labshare.models.student import Student
from labshare.services.errors import (
    DeliveryUnavailable,
    RateLimited,
    StoreUnavailable,
    Unauthenticated,
    UnknownIdentity,
)
from labshare.services.mailer import CodeMailer
from labshare.services.otp import issue_code, verify_code as consume_code
from labshare.services.rate_limit import check_otp_rate_limit
from labshare.services.sessions import (
    create_session,
    get_valid_session,
    revoke_all_student_sessions,
    revoke_session,
    touch_session,
)
from labshare.services.students import get_student, get_student_by_email

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    session_id: UUID
    student_id: UUID
    email: str


@dataclass(frozen=True)
class AuthIdentity:
    student_id: UUID
    session_id: UUID


def _lookup_student(db: Session, email: str) -> Student:
    try:
        student = get_student_by_email(db, email)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("student_lookup_failed", exc_info=True)
        raise StoreUnavailable() from exc
    if student is None:
        raise UnknownIdentity()
    return student


def request_code(
    db: Session,
    settings: Settings,
    mailer: CodeMailer,
    email: str,
    now: datetime | None = None,
) -> str:
    """Issue a login code for ``email`` and hand it to the mailer.

    Returns the code (only ever shown to the caller in dev). The code row is
    committed before delivery, so a failed delivery still counts toward the
    rate limit.
    """
    student = _lookup_student(db, email)
    # Any rollback below expires the loaded row.
    student_id, student_email = student.id, student.email

    decision = check_otp_rate_limit(db, settings, student_id, now=now)
    if not decision.allowed:
        raise RateLimited(decision.retry_after)

    try:
        code = issue_code(db, settings, student_id, now=now)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("otp_issue_failed", student_id=str(student_id), exc_info=True)
        raise StoreUnavailable() from exc

    if not mailer.send_login_code(student_email, code, settings.OTP_TTL_MINUTES):
        raise DeliveryUnavailable()
    return code


def verify_code(
    db: Session,
    settings: Settings,
    email: str,
    code: str,
    now: datetime | None = None,
) -> LoginResult:
    student = _lookup_student(db, email)
    student_id, student_email = student.id, student.email
    try:
        consume_code(db, settings, student_id, code, now=now)
        session = create_session(db, student_id, now=now)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("login_store_failed", student_id=str(student_id), exc_info=True)
        raise StoreUnavailable() from exc

    token = create_session_token(settings, str(session.id))
    logger.info("login_succeeded", student_id=str(student_id), session_id=str(session.id))
    return LoginResult(token=token, session_id=session.id, student_id=student_id, email=student_email)


def authenticate(
    db: Session,
    settings: Settings,
    token: str | None,
    now: datetime | None = None,
) -> AuthIdentity:
    session_id = decode_session_token(settings, token)
    if session_id is None:
        raise Unauthenticated()
    try:
        session = get_valid_session(db, settings, session_id, now=now)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("session_lookup_failed", exc_info=True)
        raise StoreUnavailable() from exc
    if session is None:
        logger.info("session_rejected", session_id=session_id)
        raise Unauthenticated()
    identity = AuthIdentity(student_id=session.student_id, session_id=session.id)

    try:
        touch_session(db, identity.session_id, now=now)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("session_touch_failed", session_id=session_id, exc_info=True)
    return identity


def current_student(db: Session, settings: Settings, token: str | None) -> Student | None:
    """Best-effort lookup for status checks; any failure reads as logged out."""
    try:
        identity = authenticate(db, settings, token)
        return get_student(db, identity.student_id)
    except (Unauthenticated, StoreUnavailable):
        return None
    except SQLAlchemyError:
        db.rollback()
        logger.warning("auth_status_lookup_failed", exc_info=True)
        return None


def logout(
    db: Session,
    settings: Settings,
    token: str | None,
    schedule_cleanup: Callable[[], None] | None = None,
) -> None:
    """Revoke the token's session. Never raises; clearing the cookie is up to the caller."""
    session_id = decode_session_token(settings, token)
    if session_id is not None:
        try:
            revoke_session(db, session_id)
            db.commit()
            logger.info("session_revoked", session_id=session_id)
        except SQLAlchemyError:
            db.rollback()
            logger.error("session_revoke_failed", session_id=session_id, exc_info=True)

    if schedule_cleanup is not None:
        schedule_cleanup()


def logout_everywhere(db: Session, identity: AuthIdentity) -> int:
    try:
        revoked = revoke_all_student_sessions(db, identity.student_id)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("session_revoke_all_failed", student_id=str(identity.student_id), exc_info=True)
        raise StoreUnavailable() from exc
    logger.info("sessions_revoked_all", student_id=str(identity.student_id), count=revoked)
    return revoked
