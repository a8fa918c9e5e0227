"""
📼 Tubely · Video records API
=============================

- POST /api/v1/videos             → create a draft record owned by the caller
- GET  /api/v1/videos             → list the caller's records (newest first)
- GET  /api/v1/videos/{video_id}  → fetch one record (owner only)
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tubely.core.exceptions import ForbiddenException, NotFoundException
from tubely.core.security import get_current_user_id
from tubely.db.session import get_async_db
from tubely.repositories.videos import VideoRepository
from tubely.schemas.video import VideoCreate, VideoOut
from tubely.services.upload_guard import parse_video_id

router = APIRouter(tags=["Videos"])


@router.post("/videos", response_model=VideoOut, status_code=status.HTTP_201_CREATED, summary="Create video")
async def create_video(
    payload: VideoCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
) -> VideoOut:
    video = await VideoRepository(db).create(
        user_id=user_id,
        title=payload.title.strip(),
        description=payload.description,
    )
    return VideoOut.model_validate(video)


@router.get("/videos", response_model=List[VideoOut], summary="List my videos")
async def list_videos(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
) -> List[VideoOut]:
    videos = await VideoRepository(db).list_for_user(user_id)
    return [VideoOut.model_validate(v) for v in videos]


@router.get("/videos/{video_id}", response_model=VideoOut, summary="Get video")
async def get_video(
    video_id: str,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
) -> VideoOut:
    vid = parse_video_id(video_id)
    video = await VideoRepository(db).get(vid)
    if video is None:
        raise NotFoundException("Couldn't find video")
    if video.user_id != user_id:
        raise ForbiddenException("You can't view this video")
    return VideoOut.model_validate(video)


__all__ = ["router"]
