from functools import partial

from fastapi import APIRouter, BackgroundTasks, Depends, Response
from sqlalchemy.orm import Session, sessionmaker

from labshare.api.cookies import clear_auth_cookie, set_auth_cookie
from labshare.api.deps import (
    get_current_identity,
    get_mailer,
    get_request_token,
    get_session_factory,
    get_settings,
)
from labshare.core.config import Settings
from labshare.db.session import get_db
from labshare.schemas.auth import (
    AuthStatusOut,
    LogoutAllOut,
    OTPRequestIn,
    OTPRequestOut,
    OTPVerifyIn,
    OTPVerifyOut,
    SimpleOKOut,
    StudentOut,
)
from labshare.services import auth as auth_service
from labshare.services.auth import AuthIdentity
from labshare.services.cleanup import run_lazy_cleanup
from labshare.services.mailer import CodeMailer

router = APIRouter()


@router.post("/otp/request", response_model=OTPRequestOut)
def otp_request(
    payload: OTPRequestIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: CodeMailer = Depends(get_mailer),
):
    code = auth_service.request_code(db, settings, mailer, payload.email)
    out = OTPRequestOut(ok=True)
    if settings.ENV == "dev":
        out.dev_code = code
    return out


@router.post("/otp/verify", response_model=OTPVerifyOut)
def otp_verify(
    payload: OTPVerifyIn,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = auth_service.verify_code(db, settings, payload.email, payload.code)
    set_auth_cookie(response, settings, result.token)
    return OTPVerifyOut(ok=True, student_id=result.student_id, email=result.email)


@router.get("/status", response_model=AuthStatusOut)
def auth_status(
    token: str | None = Depends(get_request_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    student = auth_service.current_student(db, settings, token)
    if student is None:
        return AuthStatusOut(authenticated=False)
    return AuthStatusOut(
        authenticated=True,
        student=StudentOut(id=student.id, name=student.name, email=student.email),
    )


@router.post("/logout", response_model=SimpleOKOut)
def logout(
    response: Response,
    background_tasks: BackgroundTasks,
    token: str | None = Depends(get_request_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    auth_service.logout(
        db,
        settings,
        token,
        schedule_cleanup=partial(background_tasks.add_task, run_lazy_cleanup, session_factory, settings),
    )
    clear_auth_cookie(response, settings)
    return SimpleOKOut(ok=True)


@router.post("/logout-all", response_model=LogoutAllOut)
def logout_all(
    response: Response,
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    revoked = auth_service.logout_everywhere(db, identity)
    clear_auth_cookie(response, settings)
    return LogoutAllOut(ok=True, sessions_revoked=revoked)
