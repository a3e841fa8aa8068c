from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from labshare.core.config import Settings
from labshare.db.session import SessionLocal, get_db
from labshare.services.auth import AuthIdentity, authenticate
from labshare.services.mailer import CodeMailer, SMTPMailer


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(settings: Settings = Depends(get_settings)) -> CodeMailer:
    return SMTPMailer.from_settings(settings)


def get_session_factory() -> sessionmaker:
    return SessionLocal


def get_request_token(request: Request, settings: Settings = Depends(get_settings)) -> str | None:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_identity(
    token: str | None = Depends(get_request_token),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> AuthIdentity:
    return authenticate(db, settings, token)
