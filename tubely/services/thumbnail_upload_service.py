# tubely/services/thumbnail_upload_service.py
from __future__ import annotations

"""Thumbnail upload pipeline.

Same precondition ordering as the video pipeline. Thumbnails are small, so
the part is read into memory (after the 10 MiB declared-size check and again
against observed bytes) and pushed to the store as a single object under
`thumbnails/<token>.<ext>`. Nothing is cached in process.
"""

from typing import Callable, Dict, Optional
import logging

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from tubely.core.config import settings
from tubely.core.exceptions import BadRequestException, StorageException
from tubely.db.models.video import Video
from tubely.repositories.videos import VideoRepository
from tubely.services.storage_keys import allocate_storage_key
from tubely.services.upload_guard import load_owned_video, require_upload_field
from tubely.utils.aws import S3Client, S3StorageError

logger = logging.getLogger(__name__)

THUMBNAIL_FIELD = "thumbnail"
THUMBNAIL_PREFIX = "thumbnails"
THUMBNAIL_TYPES: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
}


async def upload_thumbnail(
    request: Request,
    raw_video_id: Optional[str],
    *,
    repo: VideoRepository,
    s3_factory: Callable[[], S3Client],
) -> Video:
    _, video = await load_owned_video(request, raw_video_id, repo)
    logger.info("Uploading thumbnail for video %s", video.id)
    s3 = s3_factory()

    max_bytes = settings.MAX_THUMBNAIL_UPLOAD_BYTES
    async with request.form(max_files=1) as form:
        upload = require_upload_field(
            form,
            THUMBNAIL_FIELD,
            max_bytes=max_bytes,
            allowed_types=THUMBNAIL_TYPES.keys(),
        )
        content_type = upload.content_type or ""
        data = await upload.read(max_bytes + 1)

    if len(data) > max_bytes:
        raise BadRequestException("File exceeds maximum upload size", details={"max_bytes": max_bytes})

    key = allocate_storage_key(THUMBNAIL_PREFIX, THUMBNAIL_TYPES[content_type])
    try:
        await run_in_threadpool(s3.put_bytes, key, data, content_type=content_type)
    except S3StorageError as e:
        logger.error("Durable write failed for thumbnail of video %s: %s", video.id, e)
        raise StorageException("Couldn't upload thumbnail to storage")

    video.thumbnail_url = s3.public_url(key)
    video = await repo.update(video)
    logger.info("Thumbnail for video %s stored as %s", video.id, key)
    return video


__all__ = ["THUMBNAIL_FIELD", "THUMBNAIL_TYPES", "upload_thumbnail"]
