# tubely/core/exceptions.py
from __future__ import annotations

"""
Tubely — Application Exceptions
===============================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the JSON error
shape rendered by `tubely.core.exception_handlers`.

Taxonomy
--------
- `BadRequestException`   (400) malformed id, missing/oversized/wrong-type file
- `InvalidTokenException` (401) missing/invalid/expired bearer credential
- `ForbiddenException`    (403) authenticated but not the owner
- `NotFoundException`     (404) unknown video id
- `ProcessingException`   (500) ffprobe/ffmpeg failure
- `StorageException`      (503) durable-store write failure

Anything else is an internal error and is rendered as a generic 500.

Usage
-----
    raise NotFoundException("Couldn't find video")
    raise ProcessingException("ffprobe failed", details={"stderr": "..."})
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "BadRequestException",
    "InvalidTokenException",
    "ForbiddenException",
    "NotFoundException",
    "ProcessingException",
    "StorageException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (e.g., 400/401/403/404/500/503).
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : str
        Stable machine-readable error code (e.g. ``"NOT_FOUND"``).
    request_id : str | None
        Optional request correlation id (the handler falls back to the
        middleware-provided id).
    details : dict | list | str | None
        Machine-readable details (e.g., tool diagnostics, limits).
    headers : dict | None
        Optional headers (e.g., `{"WWW-Authenticate": "Bearer"}`).
    """

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        status_code = int(status_code or self.default_status)
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: str = code or self.default_code
        self.message: str = message
        self.request_id: Optional[str] = request_id
        self.details: Optional[Any] = details

    # ── [Helper] Canonical body used by handlers ───────────────────────────
    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return the problem-like JSON fields contributed by this exception."""
        body: Dict[str, Any] = {
            "code": self.code,
            "request_id": self.request_id or fallback_request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        return body


# ──────────────────────────────────────────────────────────────
# 🚫 Request validation
# ──────────────────────────────────────────────────────────────
class BadRequestException(AppException):
    """Raised for malformed identifiers and rejected upload payloads."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"


# ──────────────────────────────────────────────────────────────
# 🔑 Auth / ownership
# ──────────────────────────────────────────────────────────────
class InvalidTokenException(AppException):
    """Raised for missing, invalid or expired tokens (401)."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Invalid or expired token", **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class ForbiddenException(AppException):
    """Raised when an authenticated user may not act on a resource."""

    default_status = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class NotFoundException(AppException):
    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


# ──────────────────────────────────────────────────────────────
# 🎞️ Pipeline failures
# ──────────────────────────────────────────────────────────────
class ProcessingException(AppException):
    """Raised when an external media tool fails (probe or remux)."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "PROCESSING_FAILED"


class StorageException(AppException):
    """Raised when the durable store rejects or fails a write."""

    default_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "STORAGE_UNAVAILABLE"
