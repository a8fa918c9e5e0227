# tubely/services/upload_guard.py
from __future__ import annotations

"""
Tubely — Upload preconditions
=============================
Checks shared by the video and thumbnail upload pipelines, applied in this
order and always before the multipart body is touched:

1) the path id parses as a UUID                   → 400
2) a valid bearer credential is present           → 401
3) the video record exists                        → 404
4) the authenticated user owns the record         → 403

Once those pass, `require_upload_field` pulls the named file part out of the
parsed form and enforces the declared size and content type.
"""

from typing import Any, Collection, Optional, Tuple
from uuid import UUID
import logging

from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request

from tubely.core.exceptions import BadRequestException, ForbiddenException, NotFoundException
from tubely.core.jwt import authenticate, get_bearer_token
from tubely.db.models.video import Video
from tubely.repositories.videos import VideoRepository

logger = logging.getLogger(__name__)


def parse_video_id(raw: Optional[str]) -> UUID:
    if not raw:
        raise BadRequestException("Invalid ID")
    try:
        return UUID(str(raw))
    except ValueError:
        raise BadRequestException("Invalid ID", details={"video_id": str(raw)[:64]})


async def load_owned_video(request: Request, raw_video_id: Optional[str], repo: VideoRepository) -> Tuple[UUID, Video]:
    """Run checks 1–4 and return `(user_id, video)`."""
    video_id = parse_video_id(raw_video_id)
    user_id = authenticate(get_bearer_token(request))

    video = await repo.get(video_id)
    if video is None:
        raise NotFoundException("Couldn't find video")
    if video.user_id != user_id:
        logger.warning("User %s tried to modify video %s owned by %s", user_id, video_id, video.user_id)
        raise ForbiddenException("Not authorized to update this video")
    return user_id, video


def require_upload_field(
    form: FormData,
    field: str,
    *,
    max_bytes: int,
    allowed_types: Collection[str],
) -> UploadFile:
    """Return the file part named `field` after the declared-metadata checks."""
    part: Any = form.get(field)
    if not isinstance(part, UploadFile):
        raise BadRequestException(f"Missing file field '{field}'")

    if part.size is not None and part.size > max_bytes:
        raise BadRequestException(
            "File exceeds maximum upload size",
            details={"max_bytes": max_bytes, "size": part.size},
        )

    if part.content_type not in allowed_types:
        raise BadRequestException(
            "Invalid file type",
            details={"content_type": part.content_type, "allowed": sorted(allowed_types)},
        )
    return part


__all__ = ["parse_video_id", "load_owned_video", "require_upload_field"]
