# tubely/services/staging.py
from __future__ import annotations

"""
Tubely — Local staging area
===========================

Uploads are copied to local disk before the media tools can read them.

- Staged names are `<video_id>-<request token>.<ext>`; the per-request token
  keeps two uploads for the same video from sharing a path.
- `StagingArea.scoped()` hands out a `StagedFiles` tracker; every path
  registered on it is deleted when the block exits, whatever the outcome.
- `copy_upload` counts the bytes it writes and aborts once `max_bytes` is
  exceeded, so the ceiling holds against observed bytes too.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Union
from uuid import UUID
import logging
import secrets

from starlette.datastructures import UploadFile
from starlette.concurrency import run_in_threadpool

from tubely.core.config import settings
from tubely.core.exceptions import BadRequestException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MiB


class StagedFiles:
    """Tracks the local files owned by one pipeline run."""

    def __init__(self) -> None:
        self._paths: List[Path] = []

    def track(self, path: Path) -> Path:
        self._paths.append(path)
        return path

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    def cleanup(self) -> None:
        # Derived files first, then the staged original.
        for path in reversed(self._paths):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Couldn't remove staged file %s: %s", path.name, e)
        self._paths.clear()


def _copy_limited(src: BinaryIO, dest: Path, max_bytes: int) -> int:
    size = 0
    src.seek(0)
    with open(dest, "wb") as out:
        while chunk := src.read(CHUNK_SIZE):
            size += len(chunk)
            if size > max_bytes:
                raise BadRequestException(
                    "File exceeds maximum upload size",
                    details={"max_bytes": max_bytes},
                )
            out.write(chunk)
    return size


class StagingArea:
    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base = Path(base_dir or settings.ASSETS_ROOT)
        self.base.mkdir(parents=True, exist_ok=True)

    def staging_path(self, video_id: Union[UUID, str], extension: str) -> Path:
        token = secrets.token_hex(8)
        return self.base / f"{video_id}-{token}.{extension.lstrip('.')}"

    @contextmanager
    def scoped(self) -> Iterator[StagedFiles]:
        files = StagedFiles()
        try:
            yield files
        finally:
            files.cleanup()

    async def copy_upload(self, upload: UploadFile, dest: Path, *, max_bytes: int) -> int:
        """Write the uploaded part to `dest`, replacing any existing file."""
        size = await run_in_threadpool(_copy_limited, upload.file, dest, max_bytes)
        logger.debug("Staged %s bytes at %s", size, dest.name)
        return size


__all__ = ["CHUNK_SIZE", "StagedFiles", "StagingArea"]
