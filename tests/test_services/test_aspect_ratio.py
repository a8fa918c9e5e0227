# tests/test_services/test_aspect_ratio.py
from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

import pytest

from tubely.core.exceptions import ProcessingException
from tubely.schemas.video import AspectRatio
from tubely.services import aspect_ratio, media_tools
from tubely.services.aspect_ratio import LANDSCAPE_RATIO, classify_aspect_ratio, get_video_aspect_ratio
from tubely.services.media_tools import MediaToolResult


@pytest.mark.parametrize(
    "width,height,expected",
    [
        (1920, 1080, AspectRatio.LANDSCAPE),
        (1280, 720, AspectRatio.LANDSCAPE),
        (1080, 1920, AspectRatio.PORTRAIT),
        (720, 1280, AspectRatio.PORTRAIT),
        (1000, 1000, AspectRatio.OTHER),
        (1440, 1080, AspectRatio.OTHER),  # 4:3
        (2560, 1080, AspectRatio.OTHER),  # 21:9
    ],
)
def test_classify_common_resolutions(width, height, expected):
    assert classify_aspect_ratio(width, height) is expected


def test_classify_tolerance_boundaries():
    height = 1_000_000
    assert classify_aspect_ratio(round(height * LANDSCAPE_RATIO * 1.099), height) is AspectRatio.LANDSCAPE
    assert classify_aspect_ratio(round(height * LANDSCAPE_RATIO * 0.901), height) is AspectRatio.LANDSCAPE
    assert classify_aspect_ratio(round(height * LANDSCAPE_RATIO * 1.11), height) is AspectRatio.OTHER
    assert classify_aspect_ratio(round(height * LANDSCAPE_RATIO * 0.89), height) is AspectRatio.OTHER


def test_classify_is_total_and_deterministic():
    for w in range(1, 60):
        for h in range(1, 60):
            first = classify_aspect_ratio(w, h)
            assert first in set(AspectRatio)
            assert classify_aspect_ratio(w, h) is first


@pytest.mark.parametrize("width,height", [(0, 1080), (1920, 0), (-1, 5)])
def test_classify_rejects_non_positive_dimensions(width, height):
    with pytest.raises(ProcessingException):
        classify_aspect_ratio(width, height)


def _fake_tool(result: MediaToolResult, seen: list):
    async def _run(args, *, timeout=None):
        seen.append(list(args))
        return result
    return _run


@pytest.mark.anyio
async def test_probe_uses_first_video_stream(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    probe = {"streams": [{"codec_type": "audio"}, {"codec_type": "video", "width": 1080, "height": 1920},
                         {"codec_type": "video", "width": 1920, "height": 1080}]}
    seen: list = []
    monkeypatch.setattr(media_tools, "run_media_tool", _fake_tool(MediaToolResult(0, json.dumps(probe).encode(), ""), seen))

    assert await get_video_aspect_ratio(tmp_path / "in.mp4") is AspectRatio.PORTRAIT
    args = seen[0]
    assert args[1:] == ["-v", "error", "-print_format", "json", "-show_streams", str(tmp_path / "in.mp4")]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "stdout,message",
    [
        (b'{"streams": []}', "No video stream found"),
        (b'{"streams": [{"codec_type": "video"}]}', "Video stream has no dimensions"),
        (b"not json", "ffprobe returned unreadable output"),
    ],
)
async def test_probe_output_errors(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, stdout, message):
    monkeypatch.setattr(media_tools, "run_media_tool", _fake_tool(MediaToolResult(0, stdout, ""), []))
    with pytest.raises(ProcessingException) as exc:
        await aspect_ratio.probe_dimensions(tmp_path / "in.mp4")
    assert exc.value.detail == message


@pytest.mark.anyio
async def test_probe_nonzero_exit_surfaces_scrubbed_stderr(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    path = tmp_path / f"{uuid4()}-0a1b2c3d.mp4"
    stderr = f"{path}: Invalid data found when processing input\n"
    monkeypatch.setattr(media_tools, "run_media_tool", _fake_tool(MediaToolResult(1, b"", stderr), []))

    with pytest.raises(ProcessingException) as exc:
        await get_video_aspect_ratio(path)
    assert exc.value.status_code == 500
    assert exc.value.details["stderr"] == "input.mp4: Invalid data found when processing input"
