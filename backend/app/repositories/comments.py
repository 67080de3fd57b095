"""
Blog API — Comment Repository
===============================

Comments are always listed oldest first within one post.
"""

from typing import List, Optional, Tuple

from sqlalchemy import asc, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.comment import Comment


class CommentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, comment_id: int) -> Optional[Comment]:
        return await self.session.get(Comment, comment_id)

    async def get_with_author(self, comment_id: int) -> Optional[Comment]:
        result = await self.session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_post(self, post_id: int) -> List[Comment]:
        result = await self.session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.post_id == post_id)
            .order_by(asc(Comment.created_at), asc(Comment.id))
        )
        return list(result.scalars().all())

    async def list_page(
        self,
        post_id: int,
        offset: int,
        limit: int,
        author_id: Optional[int] = None,
    ) -> Tuple[List[Comment], int]:
        """Returns (comments on this page, total matching comments)."""
        conditions = [Comment.post_id == post_id]
        if author_id is not None:
            conditions.append(Comment.user_id == author_id)

        result = await self.session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(*conditions)
            .order_by(asc(Comment.created_at), asc(Comment.id))
            .offset(offset)
            .limit(limit)
        )
        items = list(result.scalars().all())

        count_result = await self.session.execute(
            select(func.count(Comment.id)).where(*conditions)
        )
        return items, count_result.scalar() or 0

    async def count_for_post(self, post_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Comment.id)).where(Comment.post_id == post_id)
        )
        return result.scalar() or 0

    async def add(self, comment: Comment) -> Comment:
        self.session.add(comment)
        await self.session.flush()
        return comment

    async def save(self, comment: Comment) -> Comment:
        await self.session.flush()
        return comment

    async def delete(self, comment: Comment) -> None:
        await self.session.execute(delete(Comment).where(Comment.id == comment.id))
