"""One-time login codes: issuance, verification and retention."""
from datetime import datetime
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import Session

from labshare.core.clock import as_utc, resolve_now
from labshare.core.config import Settings
from labshare.core.logging import get_logger
from labshare.core.security import otp_hash, random_otp_code
from labshare.models.auth_code import AuthCode
from labshare.services.errors import ExpiredCode, InvalidCode

logger = get_logger(__name__)


def issue_code(db: Session, settings: Settings, student_id: UUID, now: datetime | None = None) -> str:
    """Persist a fresh code for the student and return it for delivery.

    Older outstanding codes are left alone; verification only ever considers
    the newest matching one. Caller commits.
    """
    code = random_otp_code(settings.OTP_LENGTH)
    row = AuthCode(
        student_id=student_id,
        code_hash=otp_hash(settings, code),
        created_at=resolve_now(now),
        used=False,
    )
    db.add(row)
    db.flush()
    logger.info("otp_issued", student_id=str(student_id), code_id=str(row.id))
    return code


def _is_well_formed(settings: Settings, code: str | None) -> bool:
    return bool(code) and len(code) == settings.OTP_LENGTH and code.isascii() and code.isdigit()


def _mark_used(db: Session, code_id: UUID) -> bool:
    result = db.execute(
        sa.update(AuthCode)
        .where(AuthCode.id == code_id, AuthCode.used.is_(False))
        .values(used=True)
    )
    return result.rowcount == 1


def find_candidate(
    db: Session, settings: Settings, student_id: UUID, code: str, now: datetime
) -> AuthCode | None:
    return db.scalars(
        sa.select(AuthCode)
        .where(
            AuthCode.student_id == student_id,
            AuthCode.code_hash == otp_hash(settings, code),
            AuthCode.used.is_(False),
            AuthCode.created_at >= now - settings.otp_lookback,
        )
        .order_by(AuthCode.created_at.desc())
        .limit(1)
    ).first()


def verify_code(
    db: Session, settings: Settings, student_id: UUID, code: str, now: datetime | None = None
) -> AuthCode:
    """Consume the newest unused code matching ``code``.

    Raises InvalidCode when nothing matches (wrong digits, already used, or
    older than the lookback window) and ExpiredCode when the match is past its
    TTL; an expired match is marked used and committed before raising so it
    cannot be retried. On success the code, and any older unused code for the
    same student, is marked used but not committed.
    """
    now = resolve_now(now)
    code = (code or "").strip()
    if not _is_well_formed(settings, code):
        logger.info("otp_verify_failed", student_id=str(student_id), reason="malformed")
        raise InvalidCode()

    row = find_candidate(db, settings, student_id, code, now)
    if row is None:
        logger.info("otp_verify_failed", student_id=str(student_id), reason="not_found")
        raise InvalidCode()

    expires_at = as_utc(row.created_at) + settings.otp_ttl
    if now >= expires_at:
        _mark_used(db, row.id)
        db.commit()
        overage_minutes = round((now - expires_at).total_seconds() / 60)
        logger.info(
            "otp_verify_failed",
            student_id=str(student_id),
            code_id=str(row.id),
            reason="expired",
            overage_minutes=overage_minutes,
        )
        raise ExpiredCode(overage_minutes)

    if not _mark_used(db, row.id):
        # Lost the race against a concurrent verification of the same code.
        logger.info("otp_verify_failed", student_id=str(student_id), code_id=str(row.id), reason="already_used")
        raise InvalidCode()
    # Older outstanding codes stop working once a newer one is accepted.
    db.execute(
        sa.update(AuthCode)
        .where(
            AuthCode.student_id == student_id,
            AuthCode.used.is_(False),
            AuthCode.created_at <= row.created_at,
        )
        .values(used=True)
    )
    return row


def delete_codes_created_before(db: Session, cutoff: datetime) -> int:
    """Bulk-delete code rows (used or not) created before ``cutoff``. Caller commits."""
    result = db.execute(
        sa.delete(AuthCode)
        .where(AuthCode.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
