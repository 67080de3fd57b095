"""
Blog API — Repositories
=========================

What:  One class per aggregate with one explicit query method per access
       pattern. Each repository wraps the request's AsyncSession.
How:   Relationships are declared lazy="raise", so every method that returns
       an object states exactly which relationships it loads.

Repository Inventory:
    - UserRepository:    users (the credential store)
    - PostRepository:    posts, tags, categories, media, revisions
    - CommentRepository: comments
    - LikeRepository:    likes
"""

from app.repositories.comments import CommentRepository
from app.repositories.likes import LikeRepository
from app.repositories.posts import PostRepository
from app.repositories.users import UserRepository

__all__ = ["UserRepository", "PostRepository", "CommentRepository", "LikeRepository"]
