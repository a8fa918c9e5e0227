# tubely/services/video_upload_service.py
from __future__ import annotations

"""
Tubely — Video upload pipeline
==============================
Handles `POST /api/v1/video_upload/{video_id}` end to end:

    preconditions → stage → classify → remux → allocate key
        → durable write → metadata write → cleanup

The record's `video_url` is written once, only after the durable write
succeeded. Staged and remuxed files are removed on every exit path.
"""

from typing import Callable, Optional
import logging

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from tubely.core.config import settings
from tubely.core.exceptions import StorageException
from tubely.db.models.video import Video
from tubely.repositories.videos import VideoRepository
from tubely.services import aspect_ratio, faststart
from tubely.services.staging import StagingArea
from tubely.services.storage_keys import allocate_storage_key
from tubely.services.upload_guard import load_owned_video, require_upload_field
from tubely.utils.aws import S3Client, S3StorageError

logger = logging.getLogger(__name__)

VIDEO_FIELD = "video"
VIDEO_CONTENT_TYPE = "video/mp4"
VIDEO_EXTENSION = "mp4"


async def upload_video(
    request: Request,
    raw_video_id: Optional[str],
    *,
    repo: VideoRepository,
    s3_factory: Callable[[], S3Client],
    staging: Optional[StagingArea] = None,
) -> Video:
    """Run the ingestion pipeline for one uploaded MP4 and return the updated record."""
    _, video = await load_owned_video(request, raw_video_id, repo)
    logger.info("Uploading video %s", video.id)
    s3 = s3_factory()

    staging = staging or StagingArea()
    async with request.form(max_files=1) as form:
        upload = require_upload_field(
            form,
            VIDEO_FIELD,
            max_bytes=settings.MAX_VIDEO_UPLOAD_BYTES,
            allowed_types={VIDEO_CONTENT_TYPE},
        )
        content_type = upload.content_type or VIDEO_CONTENT_TYPE

        with staging.scoped() as files:
            staged = files.track(staging.staging_path(video.id, VIDEO_EXTENSION))
            size = await staging.copy_upload(upload, staged, max_bytes=settings.MAX_VIDEO_UPLOAD_BYTES)
            logger.debug("Video %s staged (%s bytes)", video.id, size)

            category = await aspect_ratio.get_video_aspect_ratio(staged)

            # Tracked before the run so a partial output is removed as well.
            files.track(faststart.fast_start_output_path(staged))
            processed = await faststart.process_video_for_fast_start(staged)

            key = allocate_storage_key(category.value, VIDEO_EXTENSION)
            try:
                await run_in_threadpool(s3.put_file, key, processed, content_type=content_type)
            except S3StorageError as e:
                logger.error("Durable write failed for video %s: %s", video.id, e)
                raise StorageException("Couldn't upload video to storage")

    video.video_url = s3.public_url(key)
    video = await repo.update(video)
    logger.info("Video %s stored as %s", video.id, key)
    return video


__all__ = ["VIDEO_FIELD", "VIDEO_CONTENT_TYPE", "upload_video"]
