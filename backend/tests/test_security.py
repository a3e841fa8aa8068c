from datetime import timedelta

from jose import jwt

from labshare.core.clock import now_utc
from labshare.core.config import Settings
from labshare.core.security import (
    ALGO,
    create_session_token,
    decode_session_token,
    otp_hash,
    random_otp_code,
)


def test_random_otp_code_is_fixed_length_digits():
    for _ in range(200):
        code = random_otp_code(6)
        assert len(code) == 6
        assert code.isdigit()


def test_otp_hash_depends_on_pepper(settings):
    other = settings.model_copy(update={"OTP_PEPPER": "another-pepper"})
    assert otp_hash(settings, "482913") == otp_hash(settings, "482913")
    assert otp_hash(settings, "482913") != otp_hash(other, "482913")
    assert otp_hash(settings, "482913") != "482913"


def test_token_carries_session_id(settings):
    token = create_session_token(settings, "0b7c6a1e-3f5d-4a57-9a3e-4c5f0f8e2d11")
    assert decode_session_token(settings, token) == "0b7c6a1e-3f5d-4a57-9a3e-4c5f0f8e2d11"


def test_token_expiry_follows_configured_ttl(settings):
    short = settings.model_copy(update={"JWT_EXPIRES_IN": "1h"})
    issued = now_utc()
    token = create_session_token(short, "sid", now=issued)
    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_is_rejected(settings):
    token = create_session_token(settings, "sid", now=now_utc() - timedelta(days=8))
    assert decode_session_token(settings, token) is None


def test_tampered_and_foreign_tokens_are_rejected(settings):
    head, _, sig = create_session_token(settings, "sid-a").split(".")
    _, other_body, _ = create_session_token(settings, "sid-b").split(".")
    assert decode_session_token(settings, ".".join([head, other_body, sig])) is None

    foreign = Settings(DATABASE_URL="sqlite://", JWT_SECRET="someone-elses-secret")
    assert decode_session_token(settings, create_session_token(foreign, "sid")) is None

    assert decode_session_token(settings, "not-a-jwt") is None
    assert decode_session_token(settings, "") is None
    assert decode_session_token(settings, None) is None


def test_token_without_session_id_is_rejected(settings):
    token = jwt.encode(
        {"sub": "someone", "exp": now_utc() + timedelta(hours=1)},
        settings.JWT_SECRET,
        algorithm=ALGO,
    )
    assert decode_session_token(settings, token) is None
