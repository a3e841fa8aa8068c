from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from labshare.core.clock import resolve_now
from labshare.core.config import Settings
from labshare.core.logging import get_logger
from labshare.services.otp import delete_codes_created_before
from labshare.services.sessions import delete_expired_sessions

logger = get_logger(__name__)


@dataclass(frozen=True)
class CleanupResult:
    sessions_deleted: int
    auth_codes_deleted: int
    timestamp: datetime


def run_cleanup(
    db: Session,
    settings: Settings,
    session_max_age_days: int | None = None,
    code_retention_hours: int | None = None,
    now: datetime | None = None,
) -> CleanupResult:
    """Delete sessions past max age and code rows past retention, used or not.

    Idempotent; store errors roll back and propagate.
    """
    now = resolve_now(now)
    max_age = timedelta(days=session_max_age_days or settings.SESSION_MAX_AGE_DAYS)
    retention = timedelta(hours=code_retention_hours or settings.AUTH_CODE_RETENTION_HOURS)
    try:
        sessions_deleted = delete_expired_sessions(db, max_age, now=now)
        codes_deleted = delete_codes_created_before(db, now - retention)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "cleanup_completed",
        sessions_deleted=sessions_deleted,
        auth_codes_deleted=codes_deleted,
    )
    return CleanupResult(
        sessions_deleted=sessions_deleted,
        auth_codes_deleted=codes_deleted,
        timestamp=now,
    )


def run_lazy_cleanup(session_factory: Callable[[], Session], settings: Settings) -> CleanupResult | None:
    """Fire-and-forget variant: opens its own session and never raises store errors.

    Not throttled: workers keep no last-run state, so every call runs a full
    (idempotent) pass.
    """
    db = session_factory()
    try:
        return run_cleanup(db, settings)
    except SQLAlchemyError:
        logger.warning("lazy_cleanup_failed", exc_info=True)
        return None
    finally:
        db.close()
