from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.middleware.trustedhost import TrustedHostMiddleware

from labshare.api.error_handling import auth_error_handler
from labshare.api.router import router
from labshare.core.config import Settings, get_settings
from labshare.core.logging import configure_logging
from labshare.db.session import init_engine
from labshare.services.errors import AuthError


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(
        title="LabShare",
        version="0.3.0",
    )
    app.state.settings = settings

    allowed_hosts = [h.strip() for h in settings.ALLOWED_HOSTS.split(",") if h.strip()]
    if not allowed_hosts:
        allowed_hosts = ["*"]
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response: Response = await call_next(request)
        if settings.SECURITY_HEADERS_ENABLED:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
            response.headers["Content-Security-Policy"] = "frame-ancestors 'none'; base-uri 'self'"
            if settings.ENV != "dev":
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    app.add_exception_handler(AuthError, auth_error_handler)
    app.include_router(router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


# Fails fast at startup when required configuration (JWT_SECRET, DATABASE_URL) is missing.
settings = get_settings()
configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
init_engine(settings)
app = create_app(settings)
