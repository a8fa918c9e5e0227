"""
🎞️ Tubely · Upload API
======================

Multipart upload routes under `/api/v1`. Each route hands the raw request to
an upload pipeline, which runs the id/auth/ownership checks **before** the
multipart body is parsed.

Routes (2)
----------
- POST /api/v1/video_upload/{video_id}      → MP4 in field `video` (≤ 1 GiB)
- POST /api/v1/thumbnail_upload/{video_id}  → JPEG/PNG in field `thumbnail` (≤ 10 MiB)

Responses
---------
- 200 `VideoOut` with `video_url` / `thumbnail_url` set
- 400 / 401 / 403 / 404 for precondition failures
- 500 when ffprobe/ffmpeg fail, 503 when the durable store does
"""

# ─────────────────────────────────────────────────────────────────────────────
# 📦 Imports
# ─────────────────────────────────────────────────────────────────────────────
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tubely.core.exceptions import StorageException
from tubely.db.session import get_async_db
from tubely.repositories.videos import VideoRepository
from tubely.schemas.video import VideoOut
from tubely.services.thumbnail_upload_service import upload_thumbnail
from tubely.services.video_upload_service import upload_video
from tubely.utils.aws import S3Client, S3StorageError

router = APIRouter(tags=["Uploads"])


# ─────────────────────────────────────────────────────────────────────────────
# 🧰 Helpers
# ─────────────────────────────────────────────────────────────────────────────
def _json(data: Any, status_code: int = 200) -> JSONResponse:
    """Return JSONResponse with no-store headers (records carry fresh URLs)."""
    return JSONResponse(
        data,
        status_code=status_code,
        headers={"Cache-Control": "no-store", "Pragma": "no-cache"},
    )


def _ensure_s3() -> S3Client:
    """Construct an S3 client or raise 503 if storage is not configured."""
    try:
        return S3Client()
    except S3StorageError as e:
        raise StorageException(str(e))


# ─────────────────────────────────────────────────────────────────────────────
# 🎬 Video
# ─────────────────────────────────────────────────────────────────────────────
@router.post("/video_upload/{video_id}", summary="Upload, remux and store a video", response_model=VideoOut)
async def video_upload(
    video_id: str,
    request: Request,
    db: AsyncSession = Depends(get_async_db),
) -> JSONResponse:
    """
    Ingest an MP4 for an existing video record.

    Steps
    -----
    1. Validate id, bearer token, existence and ownership
    2. Validate the `video` part (declared size + `video/mp4`)
    3. Stage → classify aspect ratio → fast-start remux
    4. Store under `<landscape|portrait|other>/<token>.mp4` and record the URL
    """
    video = await upload_video(request, video_id, repo=VideoRepository(db), s3_factory=_ensure_s3)
    return _json(VideoOut.model_validate(video).model_dump(mode="json"))


# ─────────────────────────────────────────────────────────────────────────────
# 🖼️ Thumbnail
# ─────────────────────────────────────────────────────────────────────────────
@router.post("/thumbnail_upload/{video_id}", summary="Upload a thumbnail image", response_model=VideoOut)
async def thumbnail_upload(
    video_id: str,
    request: Request,
    db: AsyncSession = Depends(get_async_db),
) -> JSONResponse:
    video = await upload_thumbnail(request, video_id, repo=VideoRepository(db), s3_factory=_ensure_s3)
    return _json(VideoOut.model_validate(video).model_dump(mode="json"))


__all__ = ["router"]
