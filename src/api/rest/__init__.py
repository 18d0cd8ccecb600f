"""REST API router configuration."""

from fastapi import APIRouter

from api.rest.routes.auth import router as auth_router
from api.rest.routes.profiles import router as profiles_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(profiles_router)
