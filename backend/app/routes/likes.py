"""
Blog API — Like Routes
========================

What:  Like, unlike and count likes on a post. One like per user per post.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_identity, require_identity
from app.routes import API_PREFIX
from app.schemas.common import ErrorResponse
from app.schemas.like import LikeCountResponse, LikeResponse
from app.services.auth_service import Identity
from app.services.like_service import like_service

router = APIRouter(
    prefix=f"{API_PREFIX}/posts/{{post_id}}/likes",
    tags=["Likes"],
    dependencies=[Depends(require_identity)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=LikeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Already liked", "model": ErrorResponse}},
    summary="Like a post",
)
async def like_post(
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    return await like_service.like_post(db, identity, post_id)


@router.get("", response_model=LikeCountResponse, summary="Number of likes on a post")
async def count_likes(
    post_id: int = Path(..., description="Post ID"),
    db: AsyncSession = Depends(get_db_session),
) -> LikeCountResponse:
    return await like_service.count_likes(db, post_id)


@router.delete(
    "",
    response_model=LikeResponse,
    summary="Remove the caller's like",
    description="404 if the post does not exist or the caller has not liked it.",
)
async def unlike_post(
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    return await like_service.unlike_post(db, identity, post_id)
