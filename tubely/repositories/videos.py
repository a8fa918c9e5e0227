from __future__ import annotations

"""Video metadata repository.

Thin async wrapper over the `videos` table. Routers and the upload
orchestrators depend on this interface only (`get`, `update`, ...), never on
raw SQL.
"""

from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tubely.db.models.video import Video

logger = logging.getLogger(__name__)


class VideoRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, video_id: UUID) -> Optional[Video]:
        return await self._session.get(Video, video_id)

    async def create(self, *, user_id: UUID, title: str, description: Optional[str] = None) -> Video:
        video = Video(user_id=user_id, title=title, description=description)
        self._session.add(video)
        await self._session.commit()
        await self._session.refresh(video)
        logger.info("Created video %s for user %s", video.id, user_id)
        return video

    async def update(self, video: Video) -> Video:
        """Persist pending changes on `video` in a single commit."""
        self._session.add(video)
        await self._session.commit()
        await self._session.refresh(video)
        return video

    async def list_for_user(self, user_id: UUID) -> List[Video]:
        stmt = (
            select(Video)
            .where(Video.user_id == user_id)
            .order_by(Video.created_at.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def reset(self) -> int:
        """Delete every video record. Returns the number of rows removed."""
        result = await self._session.execute(delete(Video))
        await self._session.commit()
        return int(result.rowcount or 0)
