"""
Blog API — Comment Schemas
============================
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserPublic


class CommentRequest(BaseModel):
    """Body of POST and PUT on /posts/{post_id}/comments."""
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=10_000)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int = Field(description="Owner of the comment")
    author: UserPublic
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentListResponse(BaseModel):
    items: List[CommentResponse]
    total_count: int
    page: int
    page_size: int
