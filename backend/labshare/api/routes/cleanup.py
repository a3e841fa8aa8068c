from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from labshare.api.deps import get_settings
from labshare.core.config import Settings
from labshare.core.logging import get_logger
from labshare.core.security import constant_time_equals
from labshare.db.session import get_db
from labshare.schemas.auth import CleanupOut
from labshare.services.cleanup import run_cleanup
from labshare.services.errors import StoreUnavailable

router = APIRouter()

logger = get_logger(__name__)


def _require_cleanup_key(settings: Settings, api_key: str | None):
    if not settings.CLEANUP_API_KEY:
        return
    if not api_key or not constant_time_equals(api_key, settings.CLEANUP_API_KEY):
        raise HTTPException(401, "Unauthorized")


@router.post("", response_model=CleanupOut)
def cleanup(
    x_api_key: str | None = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    _require_cleanup_key(settings, x_api_key)
    try:
        result = run_cleanup(db, settings)
    except SQLAlchemyError:
        logger.error("scheduled_cleanup_failed", exc_info=True)
        err = StoreUnavailable("Failed to run cleanup")
        return JSONResponse(status_code=err.status_code, content=err.to_payload())
    return CleanupOut(
        ok=True,
        sessions_deleted=result.sessions_deleted,
        auth_codes_deleted=result.auth_codes_deleted,
        timestamp=result.timestamp,
    )


@router.get("")
def cleanup_info():
    return {
        "message": "Cleanup endpoint is available",
        "endpoints": {
            "POST": "Run cleanup (for cron jobs)",
            "GET": "Health check",
        },
    }
