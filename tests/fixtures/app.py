# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real FastAPI app via `create_app()` (middleware, handlers, routers)
- Swaps the DB dependency for the test engine
- Points the staging directory at a per-test temp dir
- Returns an HTTP client fixture for integration tests
"""

from pathlib import Path
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tubely.core.config import settings
from tubely.db.session import get_async_db
from tubely.main import create_app
from tests.fixtures.db import get_override_get_db


@pytest.fixture()
def staging_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Per-test ASSETS_ROOT; tests assert it is empty after each pipeline run."""
    path = tmp_path / "assets"
    path.mkdir()
    monkeypatch.setattr(settings, "ASSETS_ROOT", path)
    return path


@pytest.fixture()
async def app(db_session, staging_dir: Path) -> FastAPI:
    """🧪 Production app wired to the test database."""
    app = create_app()
    app.dependency_overrides[get_async_db] = get_override_get_db()
    return app


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """🌐 HTTP client bound to the app over ASGI (lifespan not run)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
