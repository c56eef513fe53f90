"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.avatar import router as avatar_router

router = APIRouter()
router.include_router(avatar_router)
