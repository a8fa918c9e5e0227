# tubely/db/session.py
from __future__ import annotations

"""
Tubely — Database Engine & Session Dependencies

- Async engine/session for FastAPI & tests.
- SQLite (aiosqlite) by default; PostgreSQL URLs are upgraded to asyncpg.
- Pool sizing knobs only apply to server databases.
"""

from typing import Any, AsyncGenerator, Dict
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tubely.core.config import settings

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _derive_async_url(url: str) -> str:
    """Convert a sync Postgres/SQLite URL to its async driver if needed."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and "+aiosqlite" not in url:
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _engine_kwargs(url: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(pool_recycle=1800, pool_timeout=30, pool_size=10, max_overflow=20)
    return kwargs


ASYNC_DATABASE_URL: str = _derive_async_url(settings.DATABASE_URL)

# ─────────────────────────────────────────────────────────────────────────────
# ⚡ ASYNC ENGINE: used by app
# ─────────────────────────────────────────────────────────────────────────────

async_engine: AsyncEngine = create_async_engine(ASYNC_DATABASE_URL, **_engine_kwargs(ASYNC_DATABASE_URL))

async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async SQLAlchemy session."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_models() -> None:
    """Create missing tables (dev convenience; Alembic owns real migrations)."""
    from tubely.db.base import Base

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def db_healthcheck() -> bool:
    """Quick SELECT 1 to verify DB connectivity."""
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "async_engine",
    "async_session_maker",
    "get_async_db",
    "init_models",
    "db_healthcheck",
]
