# tubely/core/security.py
from __future__ import annotations

"""
Tubely — Authentication helpers
===============================
- Access token creation (iss/aud/iat/nbf/jti)
- FastAPI dependency resolving the **current user id** from the request

Decoding lives in `tubely.core.jwt`; this module never re-implements it.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
from uuid import UUID, uuid4

from fastapi import Request
from jose import jwt

from tubely.core.config import settings
from tubely.core.jwt import authenticate, get_bearer_token


# ───────────────────────────────────────────────
# 🪪 JWT: Access Token Generation
# ───────────────────────────────────────────────
def create_access_token(
    user_id: Union[UUID, str],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed **access token** whose subject is the user id."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "exp": expire,
        "iat": now,
        "nbf": now,
        "jti": str(uuid4()),
    }
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE:
        payload["aud"] = settings.JWT_AUDIENCE

    return jwt.encode(payload, settings.JWT_SECRET_KEY.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


# ───────────────────────────────────────────────
# 👤 Dependency: current user id
# ───────────────────────────────────────────────
async def get_current_user_id(request: Request) -> UUID:
    """Authenticate the request's bearer token and return the user id."""
    return authenticate(get_bearer_token(request))


__all__ = ["create_access_token", "get_current_user_id"]
