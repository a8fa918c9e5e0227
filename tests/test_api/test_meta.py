# tests/test_api/test_meta.py
from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

from tubely.core.config import settings


@pytest.mark.anyio
async def test_healthz_and_root(async_client: AsyncClient):
    r = await async_client.get("/healthz")
    assert r.status_code == 200 and r.json() == {"ok": True}

    r = await async_client.get("/")
    assert r.json()["name"] == settings.PROJECT_NAME
    assert r.json()["version"] == settings.VERSION


@pytest.mark.anyio
async def test_request_id_is_echoed_or_generated(async_client: AsyncClient):
    rid = str(uuid.uuid4())
    r = await async_client.get("/healthz", headers={"X-Request-ID": rid})
    assert r.headers["x-request-id"] == rid

    r = await async_client.get("/healthz", headers={"X-Request-ID": "not-a-uuid"})
    generated = r.headers["x-request-id"]
    assert generated != "not-a-uuid"
    uuid.UUID(generated)


@pytest.mark.anyio
async def test_error_body_carries_request_id(async_client: AsyncClient, user_with_headers):
    _, headers = user_with_headers()
    rid = str(uuid.uuid4())
    r = await async_client.post(
        "/api/v1/video_upload/not-a-uuid",
        headers={**headers, "X-Request-ID": rid},
    )
    assert r.status_code == 400
    body = r.json()
    assert body["request_id"] == rid
    assert body["status"] == 400
    assert r.headers["content-type"].startswith("application/problem+json")
