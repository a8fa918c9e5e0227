# tubely/core/logger.py
from __future__ import annotations

"""
Tubely — Logging (Loguru)
-------------------------
Every module logs through stdlib `logging.getLogger(__name__)`; those records,
plus uvicorn/fastapi/starlette ones, are routed into a single loguru pipeline.
Each line carries the `request_id` bound by `RequestIDMiddleware`, so the
stage/probe/remux/store steps of one upload can be read back together.

Env: LOG_LEVEL (INFO), LOG_JSON (0), LOG_TO_FILE (0), LOG_DIR (logs),
LOG_ROTATION (10 MB), APP_DEBUG (0, adds loguru backtrace/diagnose).
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

INTERCEPTED = ("uvicorn", "uvicorn.error", "fastapi", "starlette", "tubely")
LOG_FILE = "tubely.log"


def _flag(name: str) -> bool:
    return os.getenv(name, "0").lower() in {"1", "true", "yes"}


def _pretty(record) -> str:
    record["extra"].setdefault("request_id", "-")
    return (
        "<green>{time:HH:mm:ss.SSS}</green> <level>{level:<7}</level> "
        "<cyan>{name}:{line}</cyan> [{extra[request_id]}] {message}\n{exception}"
    )


def _json(record) -> str:
    extra = record["extra"]
    extra["_line"] = json.dumps(
        {
            "ts": record["time"].isoformat(),
            "level": record["level"].name,
            "logger": record["name"],
            "request_id": extra.get("request_id"),
            "message": record["message"],
        },
        default=str,
    )
    return "{extra[_line]}\n{exception}"


class InterceptHandler(logging.Handler):
    """Forward stdlib records into loguru at the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(
    *,
    level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    sink: Optional[TextIO] = None,
) -> None:
    """(Re)install the loguru sinks and the stdlib intercept. Safe to call again."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = _json if (_flag("LOG_JSON") if json_logs is None else json_logs) else _pretty
    debug = _flag("APP_DEBUG")

    logger.remove()
    # Tests pass an in-memory sink and need lines written synchronously.
    logger.add(sink or sys.stdout, level=level, format=fmt, enqueue=sink is None, backtrace=debug, diagnose=debug)

    if _flag("LOG_TO_FILE"):
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / LOG_FILE),
            rotation=os.getenv("LOG_ROTATION", "10 MB"),
            level=level,
            format=fmt,
            enqueue=True,
        )

    for name in INTERCEPTED:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(level)
        std_logger.propagate = False


configure_logging()

__all__ = ["InterceptHandler", "configure_logging"]
