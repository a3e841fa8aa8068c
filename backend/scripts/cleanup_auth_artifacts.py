import sys

from sqlalchemy.exc import SQLAlchemyError

from labshare.core.config import get_settings
from labshare.core.logging import configure_logging, get_logger
from labshare.db.session import SessionLocal, init_engine
from labshare.services.cleanup import run_cleanup

logger = get_logger("cleanup_auth_artifacts")


def main() -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    init_engine(settings)

    db = SessionLocal()
    try:
        result = run_cleanup(db, settings)
    except SQLAlchemyError:
        logger.error("scheduled_cleanup_failed", exc_info=True)
        return 1
    finally:
        db.close()

    print(
        "ok: cleanup completed "
        f"(sessions={result.sessions_deleted}, "
        f"auth_codes={result.auth_codes_deleted}, "
        f"at={result.timestamp.isoformat()})"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
