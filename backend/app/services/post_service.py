"""
Blog API — Post Service
=========================

What:  Create, read, list, update and delete posts, plus their revision
       history.
How:   Stateless; each call receives the request's AsyncSession and the
       acting Identity. Writes load the target first (404 if absent), then
       ask the authorization guard (403 if not the owner), then mutate.
Who:   Called by the post routes.

Write Flow (PUT/DELETE /posts/{id}):
    ┌──────────┐    ┌──────────────┐    ┌───────────────┐    ┌──────────┐
    │  Load    │───▶│  404 if      │───▶│  Ownership    │───▶│  Mutate  │
    │  post    │    │  missing     │    │  guard (403)  │    │  & flush │
    └──────────┘    └──────────────┘    └───────────────┘    └──────────┘

Slugs:
    Derived from the title when not given, with a short random suffix if the
    derived slug is taken. An explicitly requested slug that is taken is an
    AlreadyExistsError.

Revisions:
    When an update changes the content, the previous content is stored as
    the post's next revision (1, 2, ...).
"""

import logging
import re
import secrets
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AlreadyExistsError, NotFoundError
from app.models.post import Category, Post, Tag
from app.models.user import utc_now
from app.repositories.base import translate_storage_errors
from app.repositories.comments import CommentRepository
from app.repositories.likes import LikeRepository
from app.repositories.posts import PostRepository
from app.schemas.comment import CommentResponse
from app.schemas.post import (
    PostCreateRequest,
    PostDetailResponse,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
    RevisionResponse,
    TaxonomyIn,
)
from app.services.auth_service import Identity
from app.services.authorization import Action, ensure_allowed
from app.services.pagination import PageRequest

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """'Hello, World!' → 'hello-world'. Falls back to 'post' for empty results."""
    slug = _SLUG_STRIP.sub("-", title.lower()).strip("-")[:200].rstrip("-")
    return slug or "post"


def _taxonomy_pairs(entries: List[TaxonomyIn]):
    return [(entry.name, entry.description) for entry in entries]


class PostService:
    """
    Business logic layer for posts.

    Error Handling Strategy:
        Storage failures are translated by `translate_storage_errors`
        (IntegrityError → AlreadyExistsError, anything else → StorageError).
        NotFoundError and AuthorizationError propagate unchanged.
    """

    async def _load_for_write(
        self,
        repo: PostRepository,
        post_id: int,
        identity: Identity,
        action: Action,
    ) -> Post:
        post = await repo.get_with_author(post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        ensure_allowed(identity, post.user_id, action, resource="post")
        return post

    async def _unique_slug(self, repo: PostRepository, title: str) -> str:
        base = slugify(title)
        slug = base
        while await repo.slug_exists(slug):
            slug = f"{base}-{secrets.token_hex(3)}"
        return slug

    async def create_post(
        self,
        db: AsyncSession,
        identity: Identity,
        request: PostCreateRequest,
    ) -> PostResponse:
        """
        Create a post owned by `identity`.

        Unknown tag/category names are created. published_at is stamped when
        the post is created directly as published.
        """
        repo = PostRepository(db)

        with translate_storage_errors("create_post", resource="post", field="slug"):
            if request.slug:
                if await repo.slug_exists(request.slug):
                    raise AlreadyExistsError(resource="post", field="slug")
                slug = request.slug
            else:
                slug = await self._unique_slug(repo, request.title)

            post = Post(
                user_id=identity.id,
                title=request.title,
                content=request.content,
                slug=slug,
                status=request.status,
                published_at=utc_now() if request.status == "published" else None,
            )
            post.tags = await repo.get_or_create_taxonomy(Tag, _taxonomy_pairs(request.tags))
            post.categories = await repo.get_or_create_taxonomy(
                Category, _taxonomy_pairs(request.categories)
            )
            await repo.add(post)

            if request.media is not None:
                await repo.set_media(post, **request.media.model_dump())

            post = await repo.get_with_author(post.id)

        logger.info("Post %s created by user %s (slug=%s)", post.id, identity.id, post.slug)
        return PostResponse.model_validate(post)

    async def get_post(self, db: AsyncSession, post_id: int) -> PostDetailResponse:
        """A post with its author, taxonomy, media, comments and like count."""
        with translate_storage_errors("get_post"):
            post = await PostRepository(db).get_with_author(post_id)
            if post is None:
                raise NotFoundError(resource="post", resource_id=post_id)
            comments = await CommentRepository(db).list_for_post(post_id)
            like_count = await LikeRepository(db).count_for_post(post_id)

        detail = PostDetailResponse.model_validate(post)
        detail.comments = [CommentResponse.model_validate(c) for c in comments]
        detail.comment_count = len(comments)
        detail.like_count = like_count
        return detail

    async def list_posts(
        self,
        db: AsyncSession,
        page: PageRequest,
        author_id: Optional[int] = None,
        status: Optional[str] = None,
        sort: str = "created_at_desc",
    ) -> PostListResponse:
        """
        One page of posts, newest first by default.

        total_count counts every post matching the filters, not just the page.
        """
        with translate_storage_errors("list_posts"):
            posts, total_count = await PostRepository(db).list_page(
                offset=page.offset,
                limit=page.limit,
                author_id=author_id,
                status=status,
                sort=sort,
            )

        return PostListResponse(
            items=[PostResponse.model_validate(p) for p in posts],
            total_count=total_count,
            page=page.page,
            page_size=page.page_size,
        )

    async def update_post(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: int,
        request: PostUpdateRequest,
    ) -> PostResponse:
        """
        Apply the fields present in the body to an owned post.

        Raises:
            NotFoundError:      post does not exist (→ 404)
            AuthorizationError: caller is not the owner (→ 403)
            AlreadyExistsError: requested slug is taken (→ 400)
        """
        repo = PostRepository(db)
        fields = request.model_fields_set

        with translate_storage_errors("update_post", resource="post", field="slug"):
            post = await self._load_for_write(repo, post_id, identity, Action.UPDATE)

            if "slug" in fields and request.slug and request.slug != post.slug:
                if await repo.slug_exists(request.slug, exclude_id=post.id):
                    raise AlreadyExistsError(resource="post", field="slug")
                post.slug = request.slug

            if "content" in fields and request.content is not None and request.content != post.content:
                await repo.add_revision(post.id, post.content)
                post.content = request.content

            if "title" in fields and request.title is not None:
                post.title = request.title

            if "status" in fields and request.status is not None:
                if request.status == "published" and post.published_at is None:
                    post.published_at = utc_now()
                post.status = request.status

            if "tags" in fields and request.tags is not None:
                post.tags = await repo.get_or_create_taxonomy(Tag, _taxonomy_pairs(request.tags))
            if "categories" in fields and request.categories is not None:
                post.categories = await repo.get_or_create_taxonomy(
                    Category, _taxonomy_pairs(request.categories)
                )

            if "media" in fields:
                if request.media is None:
                    await repo.remove_media(post)
                else:
                    await repo.set_media(post, **request.media.model_dump())

            await repo.save(post)
            post = await repo.get_with_author(post.id)

        logger.info("Post %s updated by user %s (fields=%s)", post_id, identity.id, sorted(fields))
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, identity: Identity, post_id: int) -> None:
        """Hard-delete an owned post with its comments, likes, media and revisions."""
        repo = PostRepository(db)
        with translate_storage_errors("delete_post"):
            post = await self._load_for_write(repo, post_id, identity, Action.DELETE)
            await repo.delete(post)
        logger.info("Post %s deleted by user %s", post_id, identity.id)

    async def list_revisions(self, db: AsyncSession, post_id: int) -> List[RevisionResponse]:
        repo = PostRepository(db)
        with translate_storage_errors("list_revisions"):
            if await repo.get(post_id) is None:
                raise NotFoundError(resource="post", resource_id=post_id)
            revisions = await repo.list_revisions(post_id)
        return [RevisionResponse.model_validate(r) for r in revisions]


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
