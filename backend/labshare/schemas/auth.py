from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def looks_like_email(value: str) -> bool:
    v = value.strip()
    return "@" in v and "." in v.split("@")[-1]


class EmailIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=254, examples=["student@example.edu"])

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not looks_like_email(value):
            raise ValueError("Invalid email")
        return value.strip()


class OTPRequestIn(EmailIn):
    pass


class OTPRequestOut(BaseModel):
    ok: bool = True
    dev_code: str | None = None


class OTPVerifyIn(EmailIn):
    code: str = Field(..., min_length=1, max_length=16)


class OTPVerifyOut(BaseModel):
    ok: bool = True
    student_id: UUID
    email: str


class StudentOut(BaseModel):
    id: UUID
    name: str | None = None
    email: str


class AuthStatusOut(BaseModel):
    authenticated: bool
    student: StudentOut | None = None


class SimpleOKOut(BaseModel):
    ok: bool = True


class LogoutAllOut(BaseModel):
    ok: bool = True
    sessions_revoked: int


class CleanupOut(BaseModel):
    ok: bool = True
    sessions_deleted: int
    auth_codes_deleted: int
    timestamp: datetime


class ErrorOut(BaseModel):
    error: str
    message: str
    retry_after: int | None = None
