"""
Blog API — Profile & User Routes
==================================
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_identity, require_identity
from app.routes import API_PREFIX
from app.schemas.common import ErrorResponse
from app.schemas.user import ProfileUpdateRequest, UserPublic, UserResponse
from app.services.auth_service import Identity
from app.services.user_service import user_service

router = APIRouter(
    prefix=API_PREFIX,
    tags=["Users"],
    dependencies=[Depends(require_identity)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get("/profile", response_model=UserResponse, summary="The caller's own profile")
async def get_profile(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_profile(db, identity)


@router.put(
    "/profile",
    response_model=UserResponse,
    responses={400: {"description": "Invalid input or username taken", "model": ErrorResponse}},
    summary="Update username, bio or profile picture",
)
async def update_profile(
    body: ProfileUpdateRequest,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_profile(db, identity, body)


@router.get(
    "/users/{user_id}",
    response_model=UserPublic,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Public view of a user",
)
async def get_user(
    user_id: int = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db_session),
) -> UserPublic:
    return await user_service.get_user(db, user_id)
