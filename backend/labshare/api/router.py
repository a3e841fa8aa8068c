from fastapi import APIRouter
from labshare.api.routes import auth, cleanup

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(cleanup.router, prefix="/cleanup", tags=["cleanup"])
