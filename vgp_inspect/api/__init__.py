"""Routes API / API routes."""

from fastapi import APIRouter

from vgp_inspect.api import (
    auth,
    inspections,
    profiles,
    sync,
)
from vgp_inspect.config import settings

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(profiles.router, prefix="/equipment-types", tags=["equipment-types"])
api_router.include_router(inspections.router, prefix="/inspections", tags=["inspections"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])


@api_router.get("/ping")
async def ping():
    """Sante de l'API / API health check."""
    return {"app": settings.APP_NAME, "version": settings.APP_VERSION, "status": "ok"}
