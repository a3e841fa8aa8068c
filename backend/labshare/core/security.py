import hashlib
import hmac
import secrets
from datetime import datetime

from jose import JWTError, jwt

from labshare.core.clock import resolve_now
from labshare.core.config import Settings
from labshare.core.logging import get_logger

ALGO = "HS256"

logger = get_logger(__name__)


def random_otp_code(length: int = 6) -> str:
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def otp_hash(settings: Settings, code: str) -> str:
    # Stable hash so lookups stay equality matches (peppered)
    raw = (settings.OTP_PEPPER + ":" + code).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def create_session_token(settings: Settings, session_id: str, now: datetime | None = None) -> str:
    issued_at = resolve_now(now)
    payload = {
        "session_id": session_id,
        "iat": issued_at,
        "exp": issued_at + settings.token_ttl,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGO)


def decode_session_token(settings: Settings, token: str | None) -> str | None:
    """Return the session id carried by a signed token, or None.

    Bad signatures, malformed tokens and expired tokens all come back as None;
    the reason is only logged.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGO])
    except JWTError as exc:
        logger.debug("token_verify_failed", reason=type(exc).__name__)
        return None
    session_id = payload.get("session_id")
    if not isinstance(session_id, str) or not session_id:
        logger.debug("token_verify_failed", reason="missing_session_id")
        return None
    return session_id
