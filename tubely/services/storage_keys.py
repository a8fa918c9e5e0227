# tubely/services/storage_keys.py
from __future__ import annotations

"""Storage key allocation for durable objects.

Keys look like `<prefix>/<64 hex chars>.<ext>`. The token comes from
`secrets` (32 random bytes), so keys are unguessable; no uniqueness check is
made against existing objects. Every call returns a fresh key, even for the
same video, so re-uploads leave the previous object in place.
"""

import secrets

TOKEN_BYTES = 32


def allocate_storage_key(prefix: str, extension: str) -> str:
    prefix = prefix.strip("/")
    extension = extension.lstrip(".")
    return f"{prefix}/{secrets.token_hex(TOKEN_BYTES)}.{extension}"


__all__ = ["TOKEN_BYTES", "allocate_storage_key"]
