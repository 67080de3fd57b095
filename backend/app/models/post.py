"""
Blog API — Post, Taxonomy, Media and Revision Models
======================================================

What:  ORM models for posts and everything that hangs off a post.

Tables:
    posts            one row per post, owned by users.id
    tags, categories named taxonomy entries (unique names)
    post_tags        many-to-many join posts ↔ tags
    post_categories  many-to-many join posts ↔ categories
    media            optional metadata for one attached file per post
    post_revisions   previous versions of a post's content

Relationship loading:
    Every relationship is declared lazy="raise". Nothing is loaded implicitly;
    the repositories in app.repositories state exactly what each access
    pattern needs via selectinload(). Touching an unloaded relationship is a
    programming error and fails loudly.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User, utc_now

POST_STATUSES = ("draft", "published", "archived")


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

post_categories = Table(
    "post_categories",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class Post(Base):
    """
    A blog post.

    Ownership:
        user_id is the creating user's id. Only that user may update or delete
        the post (enforced per request by the authorization guard).

    Status:
        draft → published → archived. published_at is stamped the first time
        the post becomes published and is never cleared afterwards.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # May include HTML; rendered by the client.
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    slug: Mapped[str] = mapped_column(String(220), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    author: Mapped[User] = relationship(User, lazy="raise")
    tags: Mapped[List[Tag]] = relationship(Tag, secondary=post_tags, lazy="raise")
    categories: Mapped[List[Category]] = relationship(
        Category, secondary=post_categories, lazy="raise"
    )
    media: Mapped[Optional["Media"]] = relationship(
        "Media", uselist=False, lazy="raise", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'archived')", name="ck_posts_status"
        ),
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug='{self.slug}', status='{self.status}')>"


class Media(Base):
    """Metadata for a file attached to a post. The bytes live elsewhere."""

    __tablename__ = "media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(1024), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)


class PostRevision(Base):
    """
    A previous version of a post's content.

    revision numbers start at 1 and increase by one per content change.
    """

    __tablename__ = "post_revisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    revision: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("post_id", "revision", name="uq_post_revisions_post_revision"),
    )
