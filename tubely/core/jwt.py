# tubely/core/jwt.py
from __future__ import annotations

"""
Tubely — JWT helpers
====================
- `decode_token` with issuer/audience enforcement when configured
- Case-insensitive Bearer token extraction from a request
- `authenticate` — the auth collaborator used by the upload pipeline:
  bearer credential in, authenticated user id out (or 401)

Notes
-----
- Token *creation* lives in `tubely.core.security`.
- Standard `exp`/`nbf`/`iat` checks are applied by python-jose.
"""

from typing import Any, Dict, Optional
from uuid import UUID
import logging

from jose import ExpiredSignatureError, JWTError, jwt
from starlette.requests import HTTPConnection

from tubely.core.config import settings
from tubely.core.exceptions import InvalidTokenException

logger = logging.getLogger(__name__)


def _get_expected_issuer() -> Optional[str]:
    return getattr(settings, "JWT_ISSUER", None) or None


def _get_expected_audience() -> Optional[str]:
    return getattr(settings, "JWT_AUDIENCE", None) or None


# ─────────────────────────────────────────────────────────────
# 🔓 Decode JWT Token
# ─────────────────────────────────────────────────────────────
def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT.

    Security checks
    ---------------
    1) Verify signature and standard claims (exp/nbf/iat)
    2) Enforce issuer/audience when configured
    3) Require a subject

    Raises
    ------
    InvalidTokenException
        For invalid/expired tokens or a missing subject.
    """
    issuer = _get_expected_issuer()
    audience = _get_expected_audience()
    options: Dict[str, Any] = {"verify_aud": bool(audience)}

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options=options,
            audience=audience,
            issuer=issuer,
        )
    except ExpiredSignatureError:
        logger.info("Token expired.")
        raise InvalidTokenException("Token has expired.")
    except JWTError as e:
        logger.warning("JWT decoding failed: %s", e)
        raise InvalidTokenException("Invalid token.")

    if not payload.get("sub"):
        logger.warning("Missing sub in token payload.")
        raise InvalidTokenException("Token missing user ID.")

    return payload


# ─────────────────────────────────────────────────────────────
# 📥 Extract Bearer Token from Authorization Header
# ─────────────────────────────────────────────────────────────
def get_bearer_token(request: HTTPConnection) -> str:
    """Extract a Bearer token from the `Authorization` header (case-insensitive)."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        logger.warning("Missing Authorization header.")
        raise InvalidTokenException("Missing Authorization header.")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Malformed Authorization header.")
        raise InvalidTokenException("Invalid Authorization scheme.")

    return parts[1].strip()


# ─────────────────────────────────────────────────────────────
# 🪪 Auth collaborator
# ─────────────────────────────────────────────────────────────
def authenticate(token: str) -> UUID:
    """Resolve a bearer credential into the authenticated user id."""
    payload = decode_token(token)
    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        logger.warning("Token subject is not a UUID.")
        raise InvalidTokenException("Invalid user ID in token.")


__all__ = [
    "decode_token",
    "get_bearer_token",
    "authenticate",
]
