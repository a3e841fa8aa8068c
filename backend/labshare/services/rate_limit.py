"""OTP request rate limiting.

There is no counter table: the window is derived from auth_codes rows, so
every issued code (delivered or not) counts toward the limit.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from labshare.core.clock import as_utc, resolve_now
from labshare.core.config import Settings
from labshare.core.logging import get_logger
from labshare.models.auth_code import AuthCode

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


def check_otp_rate_limit(
    db: Session,
    settings: Settings,
    student_id: UUID,
    now: datetime | None = None,
    *,
    max_requests: int | None = None,
    window_minutes: int | None = None,
) -> RateLimitDecision:
    now = resolve_now(now)
    max_requests = max_requests or settings.OTP_RATE_LIMIT_MAX_REQUESTS
    window = timedelta(minutes=window_minutes or settings.OTP_RATE_LIMIT_WINDOW_MINUTES)
    window_seconds = int(window.total_seconds())
    cutoff = now - window

    try:
        count, oldest = db.execute(
            sa.select(sa.func.count(AuthCode.id), sa.func.min(AuthCode.created_at)).where(
                AuthCode.student_id == student_id,
                AuthCode.created_at >= cutoff,
            )
        ).one()
    except SQLAlchemyError:
        db.rollback()
        logger.warning(
            "rate_limit_check_failed",
            student_id=str(student_id),
            fail_open=settings.OTP_RATE_LIMIT_FAIL_OPEN,
            exc_info=True,
        )
        if settings.OTP_RATE_LIMIT_FAIL_OPEN:
            return RateLimitDecision(allowed=True)
        return RateLimitDecision(allowed=False, retry_after=window_seconds)

    if int(count or 0) < max_requests:
        return RateLimitDecision(allowed=True)

    if oldest is None:
        retry_after = window_seconds
    else:
        remaining = as_utc(oldest) + window - now
        retry_after = max(0, math.ceil(remaining.total_seconds()))
    logger.info("otp_rate_limited", student_id=str(student_id), count=int(count), retry_after=retry_after)
    return RateLimitDecision(allowed=False, retry_after=retry_after)
