"""
Blog API — Like Schemas
=========================
"""

from pydantic import BaseModel


class LikeCountResponse(BaseModel):
    post_id: int
    likes_count: int


class LikeResponse(LikeCountResponse):
    message: str
