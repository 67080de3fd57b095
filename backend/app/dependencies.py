"""
Blog API — Request Dependencies
=================================

What:  FastAPI dependencies shared by the route modules.

    get_settings / get_authenticator   objects built by create_app(), read
                                       from app.state
    require_identity                   the authentication step: verifies the
                                       bearer token and attaches the Identity
                                       to request.state
    get_identity                       typed access to that Identity
    get_page_request                   clamped page/page_size query values

Protected routers declare `dependencies=[Depends(require_identity)]`, so a
handler is never reached without a resolved Identity.
"""

from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.services.auth_service import Authenticator, Identity
from app.services.pagination import PageRequest

# auto_error=False: a missing header becomes our AuthenticationError (401 with
# the standard envelope) instead of FastAPI's own 403.
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


async def require_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(reason="missing_token")

    identity = await authenticator.resolve_identity(db, credentials.credentials)
    request.state.identity = identity
    return identity


def get_identity(request: Request) -> Identity:
    """
    The Identity attached by `require_identity`.

    Raises AuthenticationError if the route was not guarded, so an unguarded
    handler can never act as an anonymous user.
    """
    identity = getattr(request.state, "identity", None)
    if not isinstance(identity, Identity):
        raise AuthenticationError(reason="no_identity_on_request")
    return identity


def get_page_request(
    page: int = Query(default=1, description="1-based page number; values below 1 mean 1"),
    page_size: Optional[int] = Query(
        default=None,
        description="Items per page; defaults to DEFAULT_PAGE_SIZE and is capped at MAX_PAGE_SIZE",
    ),
    settings: Settings = Depends(get_settings),
) -> PageRequest:
    return PageRequest.from_query(
        page,
        page_size,
        default_size=settings.default_page_size,
        max_size=settings.max_page_size,
    )
