# tests/test_api/test_thumbnail_upload.py
from __future__ import annotations

import re
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tubely.core.config import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
THUMB_RE = re.compile(r"^https://test-bucket\.s3\.us-east-1\.amazonaws\.com/thumbnails/[0-9a-f]{64}\.(png|jpg)$")


def _files(data: bytes = PNG_BYTES, content_type: str = "image/png", field: str = "thumbnail"):
    return {field: ("thumb.png", data, content_type)}


@pytest.mark.anyio
@pytest.mark.parametrize("content_type,ext", [("image/png", "png"), ("image/jpeg", "jpg")])
async def test_upload_thumbnail_sets_url(
    async_client: AsyncClient, db_session: AsyncSession, user_with_headers, create_video, fake_s3,
    content_type, ext,
):
    user_id, headers = user_with_headers()
    video = await create_video(user_id)

    r = await async_client.post(
        f"/api/v1/thumbnail_upload/{video.id}",
        files=_files(content_type=content_type),
        headers=headers,
    )
    assert r.status_code == 200, r.text
    url = r.json()["thumbnail_url"]
    assert THUMB_RE.match(url) and url.endswith(f".{ext}")
    assert r.json()["video_url"] is None

    put = fake_s3.client.puts[0]
    assert put["ContentType"] == content_type
    assert put["Body"] == PNG_BYTES

    await db_session.refresh(video)
    assert video.thumbnail_url == url


@pytest.mark.anyio
async def test_thumbnail_rejects_other_image_types(async_client: AsyncClient, user_with_headers, create_video, fake_s3):
    user_id, headers = user_with_headers()
    video = await create_video(user_id)

    r = await async_client.post(
        f"/api/v1/thumbnail_upload/{video.id}",
        files=_files(content_type="image/gif"),
        headers=headers,
    )
    assert r.status_code == 400
    assert fake_s3.client.puts == []


@pytest.mark.anyio
async def test_thumbnail_size_limit(
    async_client: AsyncClient, user_with_headers, create_video, fake_s3, monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr(settings, "MAX_THUMBNAIL_UPLOAD_BYTES", 32)
    user_id, headers = user_with_headers()
    video = await create_video(user_id)

    r = await async_client.post(f"/api/v1/thumbnail_upload/{video.id}", files=_files(b"x" * 33), headers=headers)
    assert r.status_code == 400
    assert fake_s3.client.puts == []


@pytest.mark.anyio
async def test_thumbnail_ownership_and_lookup(async_client: AsyncClient, user_with_headers, create_video, fake_s3):
    owner_id, _ = user_with_headers()
    _, other_headers = user_with_headers()
    video = await create_video(owner_id)

    r = await async_client.post(f"/api/v1/thumbnail_upload/{video.id}", files=_files(), headers=other_headers)
    assert r.status_code == 403

    r = await async_client.post(f"/api/v1/thumbnail_upload/{uuid4()}", files=_files(), headers=other_headers)
    assert r.status_code == 404

    r = await async_client.post(f"/api/v1/thumbnail_upload/{video.id}", files=_files())
    assert r.status_code == 401
    assert fake_s3.client.puts == []


@pytest.mark.anyio
async def test_thumbnail_storage_failure(
    async_client: AsyncClient, db_session: AsyncSession, user_with_headers, create_video, fake_s3,
):
    fake_s3.client.fail = True
    user_id, headers = user_with_headers()
    video = await create_video(user_id)

    r = await async_client.post(f"/api/v1/thumbnail_upload/{video.id}", files=_files(), headers=headers)
    assert r.status_code == 503
    await db_session.refresh(video)
    assert video.thumbnail_url is None


@pytest.mark.anyio
async def test_thumbnail_unconfigured_bucket_after_preconditions(
    async_client: AsyncClient, user_with_headers, create_video, monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr(settings, "AWS_BUCKET_NAME", None)
    user_id, headers = user_with_headers()

    r = await async_client.post("/api/v1/thumbnail_upload/not-a-uuid", files=_files(), headers=headers)
    assert r.status_code == 400
    r = await async_client.post(f"/api/v1/thumbnail_upload/{uuid4()}", files=_files())
    assert r.status_code == 401

    video = await create_video(user_id)
    r = await async_client.post(f"/api/v1/thumbnail_upload/{video.id}", files=_files(), headers=headers)
    assert r.status_code == 503
