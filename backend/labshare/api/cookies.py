from fastapi import Response

from labshare.core.config import Settings


def set_auth_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.ENV != "dev",
        samesite="lax",
        path="/",
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value="",
        max_age=0,
        httponly=True,
        secure=settings.ENV != "dev",
        samesite="lax",
        path="/",
    )
