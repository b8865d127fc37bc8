from fastapi import APIRouter

from . import auth, session

router = APIRouter()
router.include_router(session.router, prefix="/session", tags=["session"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
