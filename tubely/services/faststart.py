# tubely/services/faststart.py
from __future__ import annotations

"""
Tubely — Fast-start remux
=========================

Rewrites an MP4 so its `moov` index sits at the front of the file, letting
players start before the download finishes. Streams are copied, never
re-encoded, and container/stream metadata is carried over.

The output lands next to the input as `<input>.processing`; callers own both
files and must delete them.
"""

from pathlib import Path
import logging

from tubely.core.config import settings
from tubely.core.exceptions import ProcessingException
from tubely.services import media_tools

logger = logging.getLogger(__name__)

PROCESSING_SUFFIX = ".processing"


def fast_start_output_path(path: Path) -> Path:
    return path.with_name(path.name + PROCESSING_SUFFIX)


def fast_start_command(input_path: Path, output_path: Path) -> list[str]:
    return [
        settings.FFMPEG_BINARY,
        "-y",
        "-i",
        str(input_path),
        "-movflags",
        "faststart",
        "-map_metadata",
        "0",
        "-codec",
        "copy",
        "-f",
        "mp4",
        str(output_path),
    ]


async def process_video_for_fast_start(input_path: Path) -> Path:
    """Remux `input_path` for progressive playback and return the new path."""
    output_path = fast_start_output_path(input_path)
    result = await media_tools.run_media_tool(fast_start_command(input_path, output_path))
    if not result.ok:
        diagnostic = media_tools.scrub_diagnostic(result.stderr, [input_path, output_path])
        logger.warning("ffmpeg exited with %s: %s", result.returncode, diagnostic)
        raise ProcessingException("Couldn't process video for fast start", details={"stderr": diagnostic})
    return output_path


__all__ = ["PROCESSING_SUFFIX", "fast_start_output_path", "fast_start_command", "process_video_for_fast_start"]
