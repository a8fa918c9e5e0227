# tubely/middleware/request_id.py
from __future__ import annotations

"""
# Tubely — Request ID Middleware (pure ASGI)

- Reuses a client-supplied `X-Request-ID` when it is a valid UUID.
- Generates a UUIDv4 otherwise.
- Stores it on `request.state.request_id` (read by the error handlers) and
  echoes it on the response.
- Binds `request_id` into the **loguru** context for the whole request, so
  pipeline logs for one upload can be correlated.

## Env
- `REQUEST_ID_HEADER_NAME` (default: `X-Request-ID`)
- `REQUEST_ID_TRUST_CLIENT_IDS` ("true"/"false"; default: "true")
"""

import os
import uuid
from typing import Optional

from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

HEADER_NAME = os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID")
TRUST_CLIENT_IDS = os.getenv("REQUEST_ID_TRUST_CLIENT_IDS", "true").lower() == "true"
MAX_ID_LENGTH = 64


class RequestIDMiddleware:
    def __init__(self, app: ASGIApp, header_name: str = HEADER_NAME) -> None:
        self.app = app
        self.header_name = header_name
        self._header_bytes = header_name.lower().encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = self._choose_request_id(Headers(scope=scope))
        scope.setdefault("state", {})["request_id"] = req_id

        async def _send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers = [(k, v) for (k, v) in message.get("headers", []) if k.lower() != self._header_bytes]
                headers.append((self.header_name.encode("latin-1"), req_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        with logger.contextualize(request_id=req_id):
            await self.app(scope, receive, _send_wrapper)

    def _choose_request_id(self, headers: Headers) -> str:
        if TRUST_CLIENT_IDS:
            candidate = _parse_uuid(headers.get(self.header_name))
            if candidate:
                return candidate
        return str(uuid.uuid4())


def _parse_uuid(raw: Optional[str]) -> Optional[str]:
    if not raw or len(raw) > MAX_ID_LENGTH:
        return None
    try:
        return str(uuid.UUID(raw.strip()))
    except ValueError:
        return None


def get_request_id(request) -> str:
    """Current request id from `request.state`, or "" when absent."""
    return getattr(getattr(request, "state", object()), "request_id", "") or ""


__all__ = ["RequestIDMiddleware", "get_request_id"]
