"""
Blog API — Comment Routes
===========================

What:  Comments nested under a post. Listing is oldest first. A comment id
       that exists but belongs to a different post is a 404.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_identity, get_page_request, require_identity
from app.routes import API_PREFIX
from app.schemas.comment import CommentListResponse, CommentRequest, CommentResponse
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.auth_service import Identity
from app.services.comment_service import comment_service
from app.services.pagination import PageRequest

router = APIRouter(
    prefix=f"{API_PREFIX}/posts/{{post_id}}/comments",
    tags=["Comments"],
    dependencies=[Depends(require_identity)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Post or comment not found", "model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
async def create_comment(
    body: CommentRequest,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(db, identity, post_id, body)


@router.get("", response_model=CommentListResponse, summary="List a post's comments")
async def list_comments(
    post_id: int = Path(..., description="Post ID"),
    page: PageRequest = Depends(get_page_request),
    author_id: Optional[int] = Query(default=None, description="Only comments by this user"),
    db: AsyncSession = Depends(get_db_session),
) -> CommentListResponse:
    return await comment_service.list_comments(db, post_id, page, author_id=author_id)


@router.put(
    "/{comment_id}",
    response_model=CommentResponse,
    responses={403: {"description": "Caller does not own the comment", "model": ErrorResponse}},
    summary="Edit an owned comment",
)
async def update_comment(
    body: CommentRequest,
    post_id: int = Path(..., description="Post ID"),
    comment_id: int = Path(..., description="Comment ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(db, identity, post_id, comment_id, body)


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    responses={403: {"description": "Caller does not own the comment", "model": ErrorResponse}},
    summary="Delete an owned comment",
)
async def delete_comment(
    post_id: int = Path(..., description="Post ID"),
    comment_id: int = Path(..., description="Comment ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await comment_service.delete_comment(db, identity, post_id, comment_id)
    return MessageResponse(message="Comment deleted")
