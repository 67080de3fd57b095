"""
Blog API — Post Repository
============================

What:  Queries for posts and the rows that hang off a post (taxonomy links,
       media, revisions).

Loading:
    get                 bare post (ownership checks, existence checks)
    get_with_author     post + author + tags + categories + media
                        (everything PostResponse serializes)
    list_page           a page of posts loaded like get_with_author

Ordering:
    Lists are newest first: created_at DESC, then id DESC so posts created
    within the same clock tick still have a stable order.
"""

from typing import Iterable, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.comment import Comment
from app.models.like import Like
from app.models.post import (
    Category,
    Media,
    Post,
    PostRevision,
    Tag,
    post_categories,
    post_tags,
)

TaxonomyT = TypeVar("TaxonomyT", Tag, Category)


def _post_loader_options():
    return (
        selectinload(Post.author),
        selectinload(Post.tags),
        selectinload(Post.categories),
        selectinload(Post.media),
    )


class PostRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Posts ─────────────────────────────────────────────────────────────

    async def get(self, post_id: int) -> Optional[Post]:
        return await self.session.get(Post, post_id)

    async def get_with_author(self, post_id: int) -> Optional[Post]:
        """
        Load a post with everything PostResponse needs.

        populate_existing refreshes a post already in the session (e.g. one
        just flushed by an update) so newly assigned relationships are
        loaded instead of raising.
        """
        result = await self.session.execute(
            select(Post)
            .options(*_post_loader_options())
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_page(
        self,
        offset: int,
        limit: int,
        author_id: Optional[int] = None,
        status: Optional[str] = None,
        sort: str = "created_at_desc",
    ) -> Tuple[List[Post], int]:
        """
        Returns (posts on this page, total posts matching the filters).

        Args:
            offset:    rows to skip
            limit:     page size
            author_id: only posts owned by this user
            status:    only posts in this status
            sort:      'created_at_desc' (default) or 'created_at_asc'
        """
        conditions = []
        if author_id is not None:
            conditions.append(Post.user_id == author_id)
        if status is not None:
            conditions.append(Post.status == status)

        query = select(Post).options(*_post_loader_options()).where(*conditions)
        if sort == "created_at_asc":
            query = query.order_by(Post.created_at, Post.id)
        else:
            query = query.order_by(desc(Post.created_at), desc(Post.id))

        result = await self.session.execute(query.offset(offset).limit(limit))
        items = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count(Post.id)).where(*conditions))
        return items, count_result.scalar() or 0

    async def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(func.count(Post.id)).where(Post.slug == slug)
        if exclude_id is not None:
            query = query.where(Post.id != exclude_id)
        result = await self.session.execute(query)
        return bool(result.scalar())

    async def add(self, post: Post) -> Post:
        self.session.add(post)
        await self.session.flush()
        return post

    async def save(self, post: Post) -> Post:
        await self.session.flush()
        return post

    async def delete(self, post: Post) -> None:
        """
        Hard-delete a post and every row that references it.

        Children are removed with explicit statements, so nothing depends on
        the database enforcing ON DELETE CASCADE (SQLite does not by default).
        """
        post_id = post.id
        await self.session.execute(delete(Comment).where(Comment.post_id == post_id))
        await self.session.execute(delete(Like).where(Like.post_id == post_id))
        await self.session.execute(delete(Media).where(Media.post_id == post_id))
        await self.session.execute(delete(PostRevision).where(PostRevision.post_id == post_id))
        await self.session.execute(delete(post_tags).where(post_tags.c.post_id == post_id))
        await self.session.execute(
            delete(post_categories).where(post_categories.c.post_id == post_id)
        )
        await self.session.execute(delete(Post).where(Post.id == post_id))

    # ── Tags & Categories ─────────────────────────────────────────────────

    async def get_or_create_taxonomy(
        self,
        model: Type[TaxonomyT],
        entries: Iterable[Tuple[str, str]],
    ) -> List[TaxonomyT]:
        """
        Resolve (name, description) pairs to Tag/Category rows, creating the
        missing ones. Duplicate names in the input collapse to one row.
        Existing rows keep their description.
        """
        wanted = {}
        for name, description in entries:
            wanted.setdefault(name, description)
        if not wanted:
            return []

        result = await self.session.execute(select(model).where(model.name.in_(list(wanted))))
        found = {row.name: row for row in result.scalars().all()}

        created = [
            model(name=name, description=description)
            for name, description in wanted.items()
            if name not in found
        ]
        if created:
            self.session.add_all(created)
            await self.session.flush()
            found.update({row.name: row for row in created})

        return [found[name] for name in wanted]

    # ── Media ─────────────────────────────────────────────────────────────

    async def get_media(self, post_id: int) -> Optional[Media]:
        result = await self.session.execute(select(Media).where(Media.post_id == post_id))
        return result.scalar_one_or_none()

    async def set_media(self, post: Post, filename: str, path: str, mime_type: str) -> Media:
        """Attach media metadata to a post, updating the existing row if any."""
        media = await self.get_media(post.id)
        if media is None:
            media = Media(post_id=post.id, filename=filename, path=path, mime_type=mime_type)
            self.session.add(media)
        else:
            media.filename = filename
            media.path = path
            media.mime_type = mime_type
        await self.session.flush()
        return media

    async def remove_media(self, post: Post) -> None:
        await self.session.execute(delete(Media).where(Media.post_id == post.id))

    # ── Revisions ─────────────────────────────────────────────────────────

    async def next_revision_number(self, post_id: int) -> int:
        result = await self.session.execute(
            select(func.max(PostRevision.revision)).where(PostRevision.post_id == post_id)
        )
        return (result.scalar() or 0) + 1

    async def add_revision(self, post_id: int, content: str) -> PostRevision:
        revision = PostRevision(
            post_id=post_id,
            revision=await self.next_revision_number(post_id),
            content=content,
        )
        self.session.add(revision)
        await self.session.flush()
        return revision

    async def list_revisions(self, post_id: int) -> List[PostRevision]:
        result = await self.session.execute(
            select(PostRevision)
            .where(PostRevision.post_id == post_id)
            .order_by(PostRevision.revision)
        )
        return list(result.scalars().all())
