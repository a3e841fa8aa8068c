from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from labshare.core.clock import parse_duration


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    ENV: str = "prod"

    DATABASE_URL: str

    JWT_SECRET: str
    JWT_EXPIRES_IN: str = "7d"
    SESSION_MAX_AGE_DAYS: int = 7
    AUTH_COOKIE_NAME: str = "access_token"

    OTP_LENGTH: int = 6
    OTP_TTL_MINUTES: int = 10
    OTP_LOOKBACK_MINUTES: int = 15
    OTP_PEPPER: str = ""
    OTP_RATE_LIMIT_MAX_REQUESTS: int = 3
    OTP_RATE_LIMIT_WINDOW_MINUTES: int = 10
    OTP_RATE_LIMIT_FAIL_OPEN: bool = True
    AUTH_CODE_RETENTION_HOURS: int = 24

    CLEANUP_API_KEY: str | None = None

    # Email delivery
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: int = 10
    MAIL_FROM: str | None = None
    MAIL_FROM_NAME: str = "LabShare"

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800
    DB_STATEMENT_TIMEOUT_MS: int = 5000

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"
    SECURITY_HEADERS_ENABLED: bool = True

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @field_validator("JWT_SECRET")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("JWT_SECRET must be set to a non-empty value")
        return value

    @field_validator("JWT_EXPIRES_IN")
    @classmethod
    def _valid_token_ttl(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator(
        "SESSION_MAX_AGE_DAYS",
        "OTP_LENGTH",
        "OTP_TTL_MINUTES",
        "OTP_LOOKBACK_MINUTES",
        "OTP_RATE_LIMIT_MAX_REQUESTS",
        "OTP_RATE_LIMIT_WINDOW_MINUTES",
        "AUTH_CODE_RETENTION_HOURS",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @model_validator(mode="after")
    def _lookback_covers_ttl(self):
        if self.OTP_LOOKBACK_MINUTES < self.OTP_TTL_MINUTES:
            raise ValueError("OTP_LOOKBACK_MINUTES must be >= OTP_TTL_MINUTES")
        return self

    @property
    def token_ttl(self) -> timedelta:
        return parse_duration(self.JWT_EXPIRES_IN)

    @property
    def session_max_age(self) -> timedelta:
        return timedelta(days=self.SESSION_MAX_AGE_DAYS)

    @property
    def session_cookie_max_age(self) -> int:
        return int(self.session_max_age.total_seconds())

    @property
    def otp_ttl(self) -> timedelta:
        return timedelta(minutes=self.OTP_TTL_MINUTES)

    @property
    def otp_lookback(self) -> timedelta:
        return timedelta(minutes=self.OTP_LOOKBACK_MINUTES)


@lru_cache
def get_settings() -> Settings:
    return Settings()
