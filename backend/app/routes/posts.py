"""
Blog API — Post Routes
========================

What:  CRUD for posts plus the revision history of a post.

Ownership:
    Any authenticated user can read any post. PUT and DELETE are reserved
    to the post's owner: 404 if the post does not exist, 403 if it exists
    but belongs to someone else.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_identity, get_page_request, require_identity
from app.routes import API_PREFIX
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.post import (
    PostCreateRequest,
    PostDetailResponse,
    PostListResponse,
    PostResponse,
    PostStatus,
    PostUpdateRequest,
    RevisionResponse,
)
from app.services.auth_service import Identity
from app.services.pagination import PageRequest
from app.services.post_service import post_service

router = APIRouter(
    prefix=f"{API_PREFIX}/posts",
    tags=["Posts"],
    dependencies=[Depends(require_identity)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)

_OWNER_ERRORS = {
    403: {"description": "Caller does not own the post", "model": ErrorResponse},
    404: {"description": "Post not found", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid input or slug taken", "model": ErrorResponse}},
    summary="Create a post owned by the caller",
)
async def create_post(
    body: PostCreateRequest,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db, identity, body)


@router.get(
    "",
    response_model=PostListResponse,
    summary="List posts, newest first",
    description=(
        "Offset pagination over all posts. `page` and `page_size` are clamped "
        "to at least 1; `page_size` is capped at MAX_PAGE_SIZE. `total_count` "
        "counts every post matching the filters."
    ),
)
async def list_posts(
    page: PageRequest = Depends(get_page_request),
    author_id: Optional[int] = Query(default=None, description="Only posts owned by this user"),
    post_status: Optional[PostStatus] = Query(default=None, alias="status"),
    sort: str = Query(
        default="created_at_desc",
        pattern="^created_at_(asc|desc)$",
        description="'created_at_desc' (newest first) or 'created_at_asc'",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> PostListResponse:
    return await post_service.list_posts(
        db, page, author_id=author_id, status=post_status, sort=sort
    )


@router.get(
    "/{post_id}",
    response_model=PostDetailResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="A post with its author, comments and like count",
)
async def get_post(
    post_id: int = Path(..., description="Post ID"),
    db: AsyncSession = Depends(get_db_session),
) -> PostDetailResponse:
    return await post_service.get_post(db, post_id)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses=_OWNER_ERRORS,
    summary="Update an owned post",
)
async def update_post(
    body: PostUpdateRequest,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_post(db, identity, post_id, body)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses=_OWNER_ERRORS,
    summary="Delete an owned post and everything attached to it",
)
async def delete_post(
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_post(db, identity, post_id)
    return MessageResponse(message="Post deleted")


@router.get(
    "/{post_id}/revisions",
    response_model=List[RevisionResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Previous versions of a post's content, oldest first",
)
async def list_revisions(
    post_id: int = Path(..., description="Post ID"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RevisionResponse]:
    return await post_service.list_revisions(db, post_id)
