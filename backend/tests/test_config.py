from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from labshare.core.clock import as_utc, parse_duration, resolve_now
from labshare.core.config import Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7d", timedelta(days=7)),
        ("1h", timedelta(hours=1)),
        ("30m", timedelta(minutes=30)),
        ("45s", timedelta(seconds=45)),
        ("2w", timedelta(weeks=2)),
    ],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "7", "d", "7 days", "-1d", "0h", "1y"])
def test_parse_duration_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_as_utc_treats_naive_as_utc():
    naive = datetime(2026, 1, 1, 12, 0, 0)
    assert as_utc(naive) == datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    offset = datetime(2026, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(offset) == datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_resolve_now_normalizes_caller_time():
    assert resolve_now(datetime(2026, 1, 1, 12, 0, 0)).tzinfo == timezone.utc
    assert resolve_now().tzinfo == timezone.utc


def test_missing_secret_fails_fast(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://")


def test_blank_secret_fails_fast():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://", JWT_SECRET="   ")


def test_bad_token_ttl_fails_fast():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://", JWT_SECRET="s", JWT_EXPIRES_IN="seven days")


def test_lookback_must_cover_ttl():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://", JWT_SECRET="s", OTP_TTL_MINUTES=20, OTP_LOOKBACK_MINUTES=15)


def test_defaults():
    s = Settings(DATABASE_URL="sqlite://", JWT_SECRET="s")
    assert s.token_ttl == timedelta(days=7)
    assert s.session_max_age == timedelta(days=7)
    assert s.session_cookie_max_age == 7 * 24 * 60 * 60
    assert s.otp_ttl == timedelta(minutes=10)
    assert s.OTP_RATE_LIMIT_MAX_REQUESTS == 3
    assert s.OTP_RATE_LIMIT_WINDOW_MINUTES == 10
    assert s.OTP_RATE_LIMIT_FAIL_OPEN is True
