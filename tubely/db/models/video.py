from __future__ import annotations

"""
🎬 Tubely — Video (metadata record for an uploaded video)
=========================================================

The single source of truth for ownership and asset URLs.

Lifecycle
---------
• Created as a draft by its owner (`title`, optional `description`).
• `video_url` stays NULL until an upload pipeline run succeeds; each
  successful run overwrites it with the new public URL in one write.
• `thumbnail_url` follows the same rule for the thumbnail pipeline.

Portability
-----------
Uses the generic `Uuid` type so the same model runs on SQLite (dev/tests)
and PostgreSQL.
"""

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Index, String, Text, Uuid

from tubely.db.base_class import Base, TimestampMixin


class Video(TimestampMixin, Base):
    """Video metadata owned by a single user."""

    __tablename__ = "videos"

    # ── Identity / ownership ─────────────────────────────────
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True, doc="Owning user; only they may mutate the record.")

    # ── Descriptive ──────────────────────────────────────────
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # ── Asset URLs ───────────────────────────────────────────
    thumbnail_url = Column(String(2048), nullable=True, doc="Public thumbnail URL, if uploaded.")
    video_url = Column(String(2048), nullable=True, doc="Public fast-start MP4 URL, if uploaded.")

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="title_not_blank"),
        Index("ix_videos_user_created", "user_id", "created_at"),
    )


__all__ = ["Video"]
