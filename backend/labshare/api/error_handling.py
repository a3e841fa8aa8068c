from fastapi import Request
from fastapi.responses import JSONResponse

from labshare.api.cookies import clear_auth_cookie
from labshare.services.errors import AuthError, RateLimited, Unauthenticated


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    response = JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    if isinstance(exc, RateLimited):
        response.headers["Retry-After"] = str(exc.retry_after)
    if isinstance(exc, Unauthenticated):
        clear_auth_cookie(response, request.app.state.settings)
    return response
