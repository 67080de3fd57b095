"""
Blog API — ORM Models
=======================

Importing this package registers every table on `Base.metadata`
(used by Alembic and `Database.create_all()`).
"""

from app.models.user import User
from app.models.post import Category, Media, Post, PostRevision, Tag, post_categories, post_tags
from app.models.comment import Comment
from app.models.like import Like

__all__ = [
    "User",
    "Post",
    "PostRevision",
    "Tag",
    "Category",
    "Media",
    "Comment",
    "Like",
    "post_tags",
    "post_categories",
]
