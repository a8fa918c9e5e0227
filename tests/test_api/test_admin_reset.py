# tests/test_api/test_admin_reset.py
from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tubely.core.config import settings
from tubely.db.models.video import Video


@pytest.mark.anyio
async def test_reset_in_dev_deletes_videos(
    async_client: AsyncClient, db_session: AsyncSession, user_with_headers, create_video,
):
    user_id, _ = user_with_headers()
    await create_video(user_id)
    await create_video(user_id)

    r = await async_client.post("/api/v1/admin/reset")
    assert r.status_code == 200
    assert r.json() == {"message": "Database reset to initial state"}
    assert (await db_session.execute(select(func.count()).select_from(Video))).scalar_one() == 0


@pytest.mark.anyio
async def test_reset_outside_dev_is_forbidden(
    async_client: AsyncClient, db_session: AsyncSession, user_with_headers, create_video,
    monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr(settings, "PLATFORM", "prod")
    user_id, _ = user_with_headers()
    await create_video(user_id)

    r = await async_client.post("/api/v1/admin/reset")
    assert r.status_code == 403
    assert r.json()["detail"] == "Reset is only allowed in dev environment."
    assert (await db_session.execute(select(func.count()).select_from(Video))).scalar_one() == 1
