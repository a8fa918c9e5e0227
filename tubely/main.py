# tubely/main.py
from __future__ import annotations

"""
# Tubely API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the Tubely media ingestion
backend.

## Middleware order
1) request id → 2) CORS → 3) gzip

## Probes
- `/healthz` — liveness (process up).
- `/readyz`  — readiness (quick DB check).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

# Importing configures loguru sinks and the stdlib intercept.
from tubely.core import logger as _logsetup  # noqa: F401
from tubely.api.v1.routers import router as api_v1_router
from tubely.core.config import settings
from tubely.core.exception_handlers import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from tubely.db.session import async_engine, db_healthcheck, init_models
from tubely.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger("tubely")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Ensure the staging directory exists.
        - Create missing tables (Alembic remains the source of truth).

    Shutdown:
        - Dispose the DB engine.
    """
    logger.info("✅ Tubely API starting up (platform=%s)", settings.PLATFORM)
    settings.ASSETS_ROOT.mkdir(parents=True, exist_ok=True)
    await init_models()
    try:
        yield
    finally:
        await async_engine.dispose()
        logger.info("🛑 Tubely API shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """Build the FastAPI app with middleware, handlers, routers and probes."""
    docs_url = "/docs" if settings.ENABLE_DOCS else None
    redoc_url = "/redoc" if settings.ENABLE_DOCS else None
    openapi_url = "/openapi.json" if settings.ENABLE_DOCS else None

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )

    # ── Middlewares (order matters: last added runs first) ─────────────────
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ─────────────────────────────────────────────────
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]

    # ── Routers (versioned API) ────────────────────────────────────────────
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # ── Meta endpoints ─────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe. No external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> dict[str, bool]:
        db_ok = await db_healthcheck()
        return {"ready": db_ok, "db": db_ok}

    @app.get("/", tags=["meta"])
    async def root() -> dict[str, object]:
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": docs_url,
        }

    return app


app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn tubely.main:app --reload`)
if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "tubely.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8091")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info"),
    )
