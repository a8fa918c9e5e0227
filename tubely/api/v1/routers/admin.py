"""Dev-only maintenance routes (`/api/v1/admin`)."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tubely.core.config import settings
from tubely.core.exceptions import ForbiddenException
from tubely.db.session import get_async_db
from tubely.repositories.videos import VideoRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


@router.post("/reset", summary="Reset the database (dev only)")
async def reset_database(db: AsyncSession = Depends(get_async_db)) -> dict[str, str]:
    if not settings.is_dev:
        raise ForbiddenException("Reset is only allowed in dev environment.")

    removed = await VideoRepository(db).reset()
    logger.warning("Database reset: %s video records removed", removed)
    return {"message": "Database reset to initial state"}


__all__ = ["router"]
