from __future__ import annotations

"""
Problem+JSON exception handlers (RFC 7807).

`tubely.main.create_app` installs these. All HTTP errors are rendered as
application/problem+json with a stable schema; `AppException` subclasses add
their `code`, `request_id` and `details`.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tubely.core.exceptions import AppException

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _problem(
    title: str,
    detail: str,
    status_code: int,
    request: Request,
    *,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "detail": detail,
        "status": status_code,
        "instance": str(request.url),
    }
    if extra:
        body.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=headers,
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    extra: Optional[Dict[str, Any]] = None
    if isinstance(exc, AppException):
        extra = exc.to_problem(fallback_request_id=_request_id(request))
    return _problem(title, detail, exc.status_code, request, extra=extra, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    detail = "Validation error"
    return _problem(
        detail,
        detail,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        request,
        extra={"errors": jsonable_encoder(exc.errors())},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    # Hide internals from the client; the traceback goes to the log.
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _problem(
        "Internal Server Error",
        "An unexpected error occurred.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        request,
        extra={"code": "INTERNAL", "request_id": _request_id(request) or "N/A"},
    )


__all__ = [
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]
