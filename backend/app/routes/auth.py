"""
Blog API — Signup & Login Routes
==================================

What:  POST /api/v1/signup and POST /api/v1/login. The only API routes that
       do not require a bearer token.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_authenticator
from app.routes import API_PREFIX
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, SignupRequest, TokenResponse, UserResponse
from app.services.auth_service import Authenticator, Identity
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_PREFIX, tags=["Auth"])


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid input or email/username taken", "model": ErrorResponse}},
    summary="Register a new user",
)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
    authenticator: Authenticator = Depends(get_authenticator),
) -> UserResponse:
    return await user_service.signup(db, authenticator, body)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange email and password for a session token",
    description=(
        "Returns a signed bearer token valid for TOKEN_TTL_DAYS. Send it as "
        "`Authorization: Bearer <token>` on every other API route."
    ),
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    authenticator: Authenticator = Depends(get_authenticator),
) -> TokenResponse:
    user = await authenticator.authenticate(db, body.email, body.password)
    issued = authenticator.issue_token(Identity.from_user(user))
    logger.info("User %s logged in", user.id)
    return TokenResponse(access_token=issued.token, expires_at=issued.expires_at)
