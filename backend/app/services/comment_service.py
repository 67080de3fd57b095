"""
Blog API — Comment Service
============================

What:  Create, list, update and delete comments on a post.
How:   The post in the URL must exist (404). A comment addressed under a post
       it does not belong to is treated as missing (404), never as someone
       else's (403). Edits and deletes are owner-only.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.comment import Comment
from app.repositories.base import translate_storage_errors
from app.repositories.comments import CommentRepository
from app.repositories.posts import PostRepository
from app.schemas.comment import CommentListResponse, CommentRequest, CommentResponse
from app.services.auth_service import Identity
from app.services.authorization import Action, ensure_allowed
from app.services.pagination import PageRequest

logger = logging.getLogger(__name__)


class CommentService:
    async def _require_post(self, db: AsyncSession, post_id: int) -> None:
        if await PostRepository(db).get(post_id) is None:
            raise NotFoundError(resource="post", resource_id=post_id)

    async def _load_for_write(
        self,
        repo: CommentRepository,
        post_id: int,
        comment_id: int,
        identity: Identity,
        action: Action,
    ) -> Comment:
        comment = await repo.get_with_author(comment_id)
        if comment is None or comment.post_id != post_id:
            raise NotFoundError(resource="comment", resource_id=comment_id)
        ensure_allowed(identity, comment.user_id, action, resource="comment")
        return comment

    async def create_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: int,
        request: CommentRequest,
    ) -> CommentResponse:
        repo = CommentRepository(db)
        with translate_storage_errors("create_comment"):
            await self._require_post(db, post_id)
            comment = await repo.add(
                Comment(post_id=post_id, user_id=identity.id, content=request.content)
            )
            comment = await repo.get_with_author(comment.id)

        logger.info("Comment %s added to post %s by user %s", comment.id, post_id, identity.id)
        return CommentResponse.model_validate(comment)

    async def list_comments(
        self,
        db: AsyncSession,
        post_id: int,
        page: PageRequest,
        author_id: Optional[int] = None,
    ) -> CommentListResponse:
        """One page of a post's comments, oldest first."""
        with translate_storage_errors("list_comments"):
            await self._require_post(db, post_id)
            comments, total_count = await CommentRepository(db).list_page(
                post_id=post_id,
                offset=page.offset,
                limit=page.limit,
                author_id=author_id,
            )

        return CommentListResponse(
            items=[CommentResponse.model_validate(c) for c in comments],
            total_count=total_count,
            page=page.page,
            page_size=page.page_size,
        )

    async def update_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: int,
        comment_id: int,
        request: CommentRequest,
    ) -> CommentResponse:
        repo = CommentRepository(db)
        with translate_storage_errors("update_comment"):
            await self._require_post(db, post_id)
            comment = await self._load_for_write(repo, post_id, comment_id, identity, Action.UPDATE)
            comment.content = request.content
            await repo.save(comment)
            comment = await repo.get_with_author(comment.id)

        logger.info("Comment %s updated by user %s", comment_id, identity.id)
        return CommentResponse.model_validate(comment)

    async def delete_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: int,
        comment_id: int,
    ) -> None:
        repo = CommentRepository(db)
        with translate_storage_errors("delete_comment"):
            await self._require_post(db, post_id)
            comment = await self._load_for_write(repo, post_id, comment_id, identity, Action.DELETE)
            await repo.delete(comment)
        logger.info("Comment %s deleted by user %s", comment_id, identity.id)


# ── Singleton Instance ────────────────────────────────────────────────────
comment_service = CommentService()
