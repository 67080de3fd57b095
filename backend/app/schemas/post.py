"""
Blog API — Post Schemas
=========================

What:  Request bodies for creating/updating posts and the post views returned
       by the API (list item, detail with comments and like count, revisions).
"""

import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.comment import CommentResponse
from app.schemas.user import UserPublic

PostStatus = Literal["draft", "published", "archived"]

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TaxonomyIn(BaseModel):
    """A tag or category reference. Unknown names are created on the fly."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=64)
    description: str = Field(default="", max_length=500)


class MediaIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    filename: str = Field(min_length=1, max_length=255)
    path: str = Field(min_length=1, max_length=1024)
    mime_type: str = Field(min_length=3, max_length=100, pattern=r"^[\w.+-]+/[\w.+-]+$")


class PostCreateRequest(BaseModel):
    """
    Body of POST /posts.

    slug is optional; when omitted it is derived from the title and made
    unique.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=100_000)
    slug: Optional[str] = Field(default=None, max_length=220)
    status: PostStatus = Field(default="draft")
    tags: List[TaxonomyIn] = Field(default_factory=list, max_length=20)
    categories: List[TaxonomyIn] = Field(default_factory=list, max_length=20)
    media: Optional[MediaIn] = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not SLUG_PATTERN.match(v):
            raise ValueError("Slug must be lowercase letters and digits separated by single hyphens")
        return v


class PostUpdateRequest(BaseModel):
    """
    Body of PUT /posts/{id}.

    Only fields present in the body are applied. Sending "media": null
    detaches the current media.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, max_length=100_000)
    slug: Optional[str] = Field(default=None, max_length=220)
    status: Optional[PostStatus] = None
    tags: Optional[List[TaxonomyIn]] = Field(default=None, max_length=20)
    categories: Optional[List[TaxonomyIn]] = Field(default=None, max_length=20)
    media: Optional[MediaIn] = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not SLUG_PATTERN.match(v):
            raise ValueError("Slug must be lowercase letters and digits separated by single hyphens")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TaxonomyResponse(BaseModel):
    id: int
    name: str
    description: str = ""

    model_config = {"from_attributes": True}


class MediaResponse(BaseModel):
    id: int
    filename: str
    path: str
    mime_type: str

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """A post with its author and taxonomy. Used by create/update and lists."""
    id: int
    user_id: int = Field(description="Owner of the post")
    author: UserPublic
    title: str
    content: str
    slug: str
    status: str
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    tags: List[TaxonomyResponse] = Field(default_factory=list)
    categories: List[TaxonomyResponse] = Field(default_factory=list)
    media: Optional[MediaResponse] = None

    model_config = {"from_attributes": True}


class PostDetailResponse(PostResponse):
    """GET /posts/{id}: the post plus its comments and like count."""
    comments: List[CommentResponse] = Field(default_factory=list)
    comment_count: int = 0
    like_count: int = 0


class PostListResponse(BaseModel):
    """
    Offset-paginated list of posts.

    total_count is the number of posts matching the filters across all pages.
    page and page_size echo the (clamped) values actually used.
    """
    items: List[PostResponse]
    total_count: int
    page: int
    page_size: int


class RevisionResponse(BaseModel):
    id: int
    post_id: int
    revision: int
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}
