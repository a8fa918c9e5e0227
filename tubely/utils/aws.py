# tubely/utils/aws.py
from __future__ import annotations

"""
🧊 Tubely • S3 Utilities
========================

Thin S3 wrapper used by the upload pipelines:
- Streamed server-side upload of staged files (`put_file`)
- Small in-memory payloads such as thumbnails (`put_bytes`)
- CDN-aware public URL building (`public_url`)

🎯 Goals
--------
- Explicit timeouts + bounded retries
- Defensive key normalization (no leading slash, no `..`)
- Pluggable creds (env / role / IRSA) with explicit override if provided
- Zero secret leakage in logs

Implementation notes
--------------------
This module is intentionally **thin** over boto3 to keep failure modes
familiar. Validation focuses on *inputs we control* (keys, headers), while
S3-specific errors bubble as `S3StorageError`.
"""

from pathlib import Path
from typing import Any, Dict, Optional
import logging
import re

import boto3
from botocore.config import Config as BotoConfig
from pydantic import SecretStr

from tubely.core.config import settings

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# 🧱 Exceptions
# ─────────────────────────────────────────────────────────────────────────────

class S3StorageError(RuntimeError):
    """Raised when a storage operation fails (network, auth, policy, etc.)."""


# ─────────────────────────────────────────────────────────────────────────────
# 🧰 Key and value validation
# ─────────────────────────────────────────────────────────────────────────────

_KEY_ALLOWED_RE = re.compile(r"[A-Za-z0-9._\-/+=@() ]+")

def _normalize_key(key: str) -> str:
    """
    Normalize and validate S3 object keys.

    Steps
    -----
    1) Coerce to str, strip whitespace
    2) Remove leading '/'
    3) Collapse '//' runs
    4) Reject path traversal ('..') and disallowed characters

    Raises
    ------
    S3StorageError
        If key is empty or contains unsafe characters.
    """
    k = str(key or "").strip().lstrip("/")
    k = re.sub(r"/{2,}", "/", k)
    if not k:
        raise S3StorageError("Invalid storage key: empty")
    if ".." in k:
        raise S3StorageError("Invalid storage key: path traversal detected")
    if not _KEY_ALLOWED_RE.fullmatch(k):
        raise S3StorageError("Invalid storage key: contains forbidden characters")
    return k


def _secret_value(v: Optional[SecretStr | str]) -> Optional[str]:
    """Return the underlying secret string without raising if not SecretStr."""
    if v is None:
        return None
    if isinstance(v, SecretStr):
        return v.get_secret_value()
    return str(v)


# ─────────────────────────────────────────────────────────────────────────────
# 📦 S3 Client
# ─────────────────────────────────────────────────────────────────────────────

class S3Client:
    """
    High-level S3 wrapper with safe defaults.

    Parameters
    ----------
    bucket : str | None
        Destination bucket. Defaults to `settings.AWS_BUCKET_NAME`.
    region_name : str | None
        Region to use for the client. Defaults to `settings.AWS_REGION`.
    endpoint_url : str | None
        Custom S3-compatible endpoint (e.g., LocalStack/MinIO). Defaults
        to `settings.AWS_S3_ENDPOINT_URL`.
    cdn_base_url : str | None
        If set, public URLs are built on this base instead of the bucket.
        Defaults to `settings.cdn_base_url`.
    sse_mode : str | None
        "AES256" or "aws:kms". Defaults from `settings.AWS_SSE_MODE`.
    kms_key_id : str | None
        KMS key id/arn when `sse_mode="aws:kms"`. Defaults from settings.

    Notes
    -----
    * Credentials:
        - If `AWS_ACCESS_KEY_ID` + `AWS_SECRET_ACCESS_KEY` are in settings,
          they are used explicitly; otherwise we rely on the standard AWS
          credential chain (env, profile, ECS/EC2 role, IRSA).
    * Retries/Timeouts:
        - Bounded retry policy and short connect timeout help fail fast.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        *,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        cdn_base_url: Optional[str] = None,
        sse_mode: Optional[str] = None,
        kms_key_id: Optional[str] = None,
    ) -> None:
        # 1) Resolve configuration from explicit args → settings
        self.bucket = bucket or settings.AWS_BUCKET_NAME
        if not self.bucket:
            raise S3StorageError("AWS_BUCKET_NAME not configured")

        self.region = region_name or settings.AWS_REGION
        self.endpoint_url = (endpoint_url or settings.AWS_S3_ENDPOINT_URL or "").rstrip("/") or None
        self._cdn_base = (cdn_base_url if cdn_base_url is not None else settings.cdn_base_url).rstrip("/")

        # SSE defaults (never log these)
        self._sse_mode = sse_mode or settings.AWS_SSE_MODE
        self._kms_key_id = kms_key_id or settings.AWS_KMS_KEY_ID

        # 2) Build the boto3 client with safe defaults
        cfg = BotoConfig(
            signature_version="s3v4",
            retries={"max_attempts": 5, "mode": "standard"},
            connect_timeout=3,
            read_timeout=60,
            s3={"addressing_style": "virtual"},
        )

        client_kwargs: Dict[str, Any] = {"config": cfg, "region_name": self.region}
        if self.endpoint_url:
            client_kwargs["endpoint_url"] = self.endpoint_url

        ak = settings.AWS_ACCESS_KEY_ID
        sk = _secret_value(settings.AWS_SECRET_ACCESS_KEY)
        st = _secret_value(settings.AWS_SESSION_TOKEN)
        if ak and sk:
            client_kwargs["aws_access_key_id"] = ak
            client_kwargs["aws_secret_access_key"] = sk
            if st:
                client_kwargs["aws_session_token"] = st

        try:
            self.client = boto3.client("s3", **client_kwargs)
        except Exception as e:  # pragma: no cover
            raise S3StorageError(f"Failed to create S3 client: {e}") from e

        self._repr = f"S3Client(bucket={self.bucket}, region={self.region}, endpoint={'yes' if self.endpoint_url else 'no'})"

    # ────────────────────────────────────────────────────────────────────────
    # 🚀 Server-side writes
    # ────────────────────────────────────────────────────────────────────────

    def _object_args(self, key: str, content_type: str, cache_control: Optional[str]) -> Dict[str, Any]:
        args: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": _normalize_key(key),
            "ContentType": content_type,
        }
        if cache_control:
            args["CacheControl"] = cache_control
        if self._sse_mode:
            args["ServerSideEncryption"] = self._sse_mode
            if self._sse_mode == "aws:kms" and self._kms_key_id:
                args["SSEKMSKeyId"] = self._kms_key_id
        return args

    def put_file(
        self,
        key: str,
        path: Path,
        *,
        content_type: str,
        cache_control: Optional[str] = None,
    ) -> None:
        """
        Stream a local file into the bucket under `key`.

        The file handle is passed as the request body so the object is never
        loaded fully into memory.

        Raises
        ------
        S3StorageError
            On upload failure, unreadable file, or invalid key.
        """
        args = self._object_args(key, content_type, cache_control)
        try:
            with open(path, "rb") as fh:
                self.client.put_object(Body=fh, **args)
        except Exception as e:
            raise S3StorageError(f"Failed to upload object: {e}") from e

    def put_bytes(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        cache_control: Optional[str] = None,
    ) -> None:
        """
        Upload a small in-memory payload (thumbnails, ≤ ~10MB ideal).

        Raises
        ------
        S3StorageError
            On upload failure or invalid key.
        """
        args = self._object_args(key, content_type, cache_control)
        try:
            self.client.put_object(Body=data, **args)
        except Exception as e:
            raise S3StorageError(f"Failed to upload object: {e}") from e

    # ────────────────────────────────────────────────────────────────────────
    # 🌐 Public URL helpers
    # ────────────────────────────────────────────────────────────────────────

    def cdn_url(self, key: str) -> Optional[str]:
        """CDN URL for a normalized key, or None when no CDN base is configured."""
        if not self._cdn_base:
            return None
        return f"{self._cdn_base}/{_normalize_key(key)}"

    def object_url(self, key: str) -> str:
        """
        Direct (non-signed) object URL.

        For custom endpoints, uses path-style `{endpoint}/{bucket}/{key}`.
        """
        k = _normalize_key(key)
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{k}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{k}"

    def public_url(self, key: str) -> str:
        """Retrieval URL stored on records: CDN when configured, else the bucket."""
        return self.cdn_url(key) or self.object_url(key)

    def __repr__(self) -> str:  # pragma: no cover
        return self._repr


__all__ = ["S3Client", "S3StorageError"]
