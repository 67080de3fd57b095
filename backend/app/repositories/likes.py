"""
Blog API — Like Repository
============================
"""

from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.like import Like


class LikeRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int, post_id: int) -> Optional[Like]:
        result = await self.session.execute(
            select(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        )
        return result.scalar_one_or_none()

    async def add(self, like: Like) -> Like:
        """Flushes immediately so the (user, post) unique constraint is checked here."""
        self.session.add(like)
        await self.session.flush()
        return like

    async def delete(self, like: Like) -> None:
        await self.session.execute(delete(Like).where(Like.id == like.id))

    async def count_for_post(self, post_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Like.id)).where(Like.post_id == post_id)
        )
        return result.scalar() or 0
