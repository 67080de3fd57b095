"""
Blog API — Like Service
=========================

What:  Like, unlike and count likes on a post.

Uniqueness:
    At most one like per (user, post). A second like is rejected with
    AlreadyExistsError by an explicit lookup; two concurrent first likes are
    settled by the database unique constraint, whose IntegrityError is
    translated into the same AlreadyExistsError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AlreadyExistsError, NotFoundError
from app.models.like import Like
from app.repositories.base import translate_storage_errors
from app.repositories.likes import LikeRepository
from app.repositories.posts import PostRepository
from app.schemas.like import LikeCountResponse, LikeResponse
from app.services.auth_service import Identity

logger = logging.getLogger(__name__)


class LikeService:
    async def _require_post(self, db: AsyncSession, post_id: int) -> None:
        if await PostRepository(db).get(post_id) is None:
            raise NotFoundError(resource="post", resource_id=post_id)

    async def like_post(self, db: AsyncSession, identity: Identity, post_id: int) -> LikeResponse:
        repo = LikeRepository(db)
        with translate_storage_errors("like_post", resource="like"):
            await self._require_post(db, post_id)
            if await repo.get(identity.id, post_id) is not None:
                raise AlreadyExistsError(
                    resource="like",
                    message="You have already liked this post",
                )
            await repo.add(Like(user_id=identity.id, post_id=post_id))
            likes_count = await repo.count_for_post(post_id)

        logger.info("User %s liked post %s", identity.id, post_id)
        return LikeResponse(message="Post liked", post_id=post_id, likes_count=likes_count)

    async def unlike_post(self, db: AsyncSession, identity: Identity, post_id: int) -> LikeResponse:
        """Raises NotFoundError if the post does not exist or is not liked by the caller."""
        repo = LikeRepository(db)
        with translate_storage_errors("unlike_post"):
            await self._require_post(db, post_id)
            like = await repo.get(identity.id, post_id)
            if like is None:
                raise NotFoundError(resource="like", context={"post_id": post_id})
            await repo.delete(like)
            likes_count = await repo.count_for_post(post_id)

        logger.info("User %s unliked post %s", identity.id, post_id)
        return LikeResponse(message="Post unliked", post_id=post_id, likes_count=likes_count)

    async def count_likes(self, db: AsyncSession, post_id: int) -> LikeCountResponse:
        repo = LikeRepository(db)
        with translate_storage_errors("count_likes"):
            await self._require_post(db, post_id)
            likes_count = await repo.count_for_post(post_id)
        return LikeCountResponse(post_id=post_id, likes_count=likes_count)


# ── Singleton Instance ────────────────────────────────────────────────────
like_service = LikeService()
