# tubely/services/aspect_ratio.py
from __future__ import annotations

"""
Tubely — Aspect-ratio classification
====================================

Probes a staged container with `ffprobe` and buckets its primary video
stream into `landscape` (16:9), `portrait` (9:16) or `other`.

The tolerance is relative to the reference ratio: a stream is landscape when
`|ratio / (16/9) - 1| <= 0.1`. The landscape band (~1.60–1.96) and the
portrait band (~0.51–0.62) are disjoint, so every ratio lands in exactly one
bucket.
"""

from pathlib import Path
from typing import Any, Dict, Tuple
import json
import logging

from tubely.core.config import settings
from tubely.core.exceptions import ProcessingException
from tubely.schemas.video import AspectRatio
from tubely.services import media_tools

logger = logging.getLogger(__name__)

LANDSCAPE_RATIO = 16 / 9
PORTRAIT_RATIO = 9 / 16
RATIO_TOLERANCE = 0.1


def _within_tolerance(ratio: float, reference: float) -> bool:
    return abs(ratio / reference - 1) <= RATIO_TOLERANCE


def classify_aspect_ratio(width: int, height: int) -> AspectRatio:
    """Bucket a width/height pair into an `AspectRatio`."""
    if width <= 0 or height <= 0:
        raise ProcessingException("Video stream has invalid dimensions", details={"width": width, "height": height})

    ratio = width / height
    if _within_tolerance(ratio, LANDSCAPE_RATIO):
        return AspectRatio.LANDSCAPE
    if _within_tolerance(ratio, PORTRAIT_RATIO):
        return AspectRatio.PORTRAIT
    return AspectRatio.OTHER


def _first_video_stream(probe: Dict[str, Any]) -> Dict[str, Any]:
    for stream in probe.get("streams") or []:
        if stream.get("codec_type") == "video":
            return stream
    raise ProcessingException("No video stream found")


async def probe_dimensions(path: Path) -> Tuple[int, int]:
    """Return `(width, height)` of the first video stream in `path`."""
    result = await media_tools.run_media_tool(
        [
            settings.FFPROBE_BINARY,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            str(path),
        ]
    )
    if not result.ok:
        diagnostic = media_tools.scrub_diagnostic(result.stderr, [path])
        logger.warning("ffprobe exited with %s: %s", result.returncode, diagnostic)
        raise ProcessingException("ffprobe failed", details={"stderr": diagnostic})

    try:
        probe = json.loads(result.stdout or b"{}")
    except ValueError:
        raise ProcessingException("ffprobe returned unreadable output")

    stream = _first_video_stream(probe)
    try:
        return int(stream["width"]), int(stream["height"])
    except (KeyError, TypeError, ValueError):
        raise ProcessingException("Video stream has no dimensions")


async def get_video_aspect_ratio(path: Path) -> AspectRatio:
    width, height = await probe_dimensions(path)
    category = classify_aspect_ratio(width, height)
    logger.debug("Classified %sx%s as %s", width, height, category.value)
    return category


__all__ = [
    "LANDSCAPE_RATIO",
    "PORTRAIT_RATIO",
    "RATIO_TOLERANCE",
    "classify_aspect_ratio",
    "probe_dimensions",
    "get_video_aspect_ratio",
]
