# tubely/core/config.py
from __future__ import annotations

"""
# Tubely — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- Optional external systems (S3/CDN) so imports never crash in dev.
- Media tooling (ffmpeg/ffprobe) paths and bounded run time in one place.

## Usage
    from tubely.core.config import settings
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _normalize_url_like(v: str | None, *, require_scheme: bool = True) -> str:
    """Normalize to a string URL without trailing slash."""
    s = (v or "").strip()
    if not s:
        return ""
    if require_scheme and not (s.startswith("http://") or s.startswith("https://")):
        s = "https://" + s
    return s.rstrip("/")


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - Explicit secret for JWT validation.
        - `PLATFORM=dev` unlocks the reset endpoint; anything else locks it.

    Storage:
        - S3 bucket/region are optional in dev; uploads fail with 503 when
          the bucket is missing.
        - `CDN_BASE_URL` (when set) is preferred over direct bucket URLs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Tubely API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    PLATFORM: Literal["dev", "prod"] = "dev"
    ENABLE_DOCS: bool = True

    # ── Security / JWT ────────────────────────────────────────
    JWT_SECRET_KEY: SecretStr = Field(...)
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    JWT_ISSUER: Optional[str] = "tubely-access"
    JWT_AUDIENCE: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, ge=1, le=24 * 60)

    # ── Database ──────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./tubely.db"

    # ── Local staging ─────────────────────────────────────────
    ASSETS_ROOT: Path = Path("assets")

    # ── CORS ──────────────────────────────────────────────────
    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:8091", "http://localhost:5173"]
    )

    # ── Object storage / CDN ──────────────────────────────────
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[SecretStr] = None
    AWS_SESSION_TOKEN: Optional[SecretStr] = None
    AWS_REGION: str = "us-east-1"
    AWS_BUCKET_NAME: Optional[str] = None
    AWS_S3_ENDPOINT_URL: Optional[str] = None
    AWS_SSE_MODE: Optional[Literal["AES256", "aws:kms"]] = None
    AWS_KMS_KEY_ID: Optional[str] = None
    CDN_BASE_URL: Optional[str] = None  # e.g. d111111abcdef8.cloudfront.net

    # ── Media tooling ─────────────────────────────────────────
    FFMPEG_BINARY: str = "ffmpeg"
    FFPROBE_BINARY: str = "ffprobe"
    MEDIA_TOOL_TIMEOUT_SECONDS: float = Field(300.0, gt=0)

    # ── Upload limits ─────────────────────────────────────────
    MAX_VIDEO_UPLOAD_BYTES: int = Field(1 << 30, gt=0)
    MAX_THUMBNAIL_UPLOAD_BYTES: int = Field(10 << 20, gt=0)

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _assemble_cors_origins(cls, v: str | List[str]):
        if isinstance(v, str):
            return _split_csv(v)
        return v

    @field_validator("CDN_BASE_URL", mode="before")
    @classmethod
    def _normalize_cdn_base(cls, v: str | None) -> str | None:
        """
        Accepts either 'cdn.example.com' or 'https://cdn.example.com' and
        normalizes to 'https://cdn.example.com' (no trailing slash).
        """
        s = (v or "").strip()
        if not s:
            return None
        return _normalize_url_like(s)

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_dev(self) -> bool:
        return self.PLATFORM == "dev"

    @property
    def cdn_base_url(self) -> str:
        return self.CDN_BASE_URL or ""


# Singleton instance
settings = Settings()
