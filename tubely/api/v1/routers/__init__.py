"""
🧭 Tubely • API v1 Router Aggregator
===================================

Exports the **combined `router`** plus each sub-router.

Quick usage
-----------
    from tubely.api.v1.routers import router as v1_router
    app.include_router(v1_router, prefix="/api/v1")
"""

from fastapi import APIRouter

from .admin import router as admin_router
from .uploads import router as uploads_router
from .videos import router as videos_router


def build_v1_router() -> APIRouter:
    """
    Compose the API v1 surface into a single `APIRouter`.

    Includes:
      • Video records (`/videos`)
      • Upload pipelines (`/video_upload`, `/thumbnail_upload`)
      • Dev maintenance under `/admin`
    """
    r = APIRouter()
    r.include_router(videos_router)
    r.include_router(uploads_router)
    r.include_router(admin_router, prefix="/admin")
    return r


router = build_v1_router()


__all__ = [
    "router",
    "build_v1_router",
    "admin_router",
    "uploads_router",
    "videos_router",
]
