# tests/test_services/test_staging.py
from __future__ import annotations

import io
from pathlib import Path
from uuid import uuid4

import pytest
from starlette.datastructures import UploadFile

from tubely.core.exceptions import BadRequestException
from tubely.services.staging import CHUNK_SIZE, StagingArea


def test_staging_paths_are_unique_per_request(tmp_path: Path):
    area = StagingArea(tmp_path)
    vid = uuid4()
    a, b = area.staging_path(vid, "mp4"), area.staging_path(vid, ".mp4")
    assert a != b
    assert a.parent == b.parent == tmp_path
    assert a.name.startswith(f"{vid}-") and a.suffix == ".mp4"


@pytest.mark.anyio
async def test_copy_upload_counts_bytes_across_chunks(tmp_path: Path):
    area = StagingArea(tmp_path)
    data = b"a" * (CHUNK_SIZE * 2 + 7)
    dest = tmp_path / "out.mp4"
    dest.write_bytes(b"stale contents that are longer than nothing")

    size = await area.copy_upload(UploadFile(io.BytesIO(data)), dest, max_bytes=len(data))
    assert size == len(data)
    assert dest.read_bytes() == data


@pytest.mark.anyio
async def test_copy_upload_enforces_observed_limit(tmp_path: Path):
    area = StagingArea(tmp_path)
    with pytest.raises(BadRequestException):
        await area.copy_upload(UploadFile(io.BytesIO(b"x" * 11)), tmp_path / "out.mp4", max_bytes=10)


def test_scoped_cleanup_runs_on_error(tmp_path: Path):
    area = StagingArea(tmp_path)
    with pytest.raises(RuntimeError):
        with area.scoped() as files:
            staged = files.track(area.staging_path("v", "mp4"))
            staged.write_bytes(b"1")
            files.track(staged.with_name(staged.name + ".processing"))  # never created
            raise RuntimeError("boom")
    assert list(tmp_path.iterdir()) == []


def test_staging_area_creates_base_dir(tmp_path: Path):
    base = tmp_path / "nested" / "assets"
    StagingArea(base)
    assert base.is_dir()
