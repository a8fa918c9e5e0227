from __future__ import annotations

"""
Tubely • Video Schemas & Enums
==============================

- `AspectRatio` — classification bucket used to namespace storage keys.
- `VideoCreate` / `VideoOut` — API models for video records.

Enum values double as storage key prefixes; do not rename them once objects
have been written under them.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AspectRatio(str, PyEnum):
    """Aspect-ratio category of a video's primary stream."""
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class VideoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
