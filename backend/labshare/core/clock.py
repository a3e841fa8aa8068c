import re
from datetime import datetime, timedelta, timezone

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw])\s*$")
_UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Some drivers (sqlite) hand back naive datetimes; everything we store is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_now(now: datetime | None = None) -> datetime:
    """Caller-supplied instant as aware UTC, or the current time."""
    return as_utc(now) if now is not None else now_utc()


def parse_duration(value: str) -> timedelta:
    """Parse a compact duration such as "7d", "1h", "30m", "45s" or "2w"."""
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration '{value}', expected <number><s|m|h|d|w>")
    amount, unit = int(match.group(1)), match.group(2)
    if amount <= 0:
        raise ValueError(f"Duration must be positive, got '{value}'")
    return timedelta(seconds=amount * _UNIT_SECONDS[unit])
