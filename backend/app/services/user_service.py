"""
Blog API — User Service
=========================

What:  Signup, profile read/update and public user lookup.
How:   Stateless; every call receives the request's AsyncSession. Passwords
       are hashed by the Authenticator before anything is stored.
Who:   Called by the auth routes.

Uniqueness:
    email     checked case-insensitively (stored lower-cased)
    username  checked as given. When the client omits it, one is derived from
              the email's local part and suffixed until it is free.
"""

import logging
import re
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AlreadyExistsError, NotFoundError
from app.models.user import User
from app.repositories.base import translate_storage_errors
from app.repositories.users import UserRepository
from app.schemas.user import ProfileUpdateRequest, SignupRequest, UserPublic, UserResponse
from app.services.auth_service import Authenticator, Identity

logger = logging.getLogger(__name__)

_USERNAME_STRIP = re.compile(r"[^A-Za-z0-9_.-]")
CLEARABLE_PROFILE_FIELDS = ("bio", "profile_pic")


def derive_username(email: str) -> str:
    """'Jane.Doe+blog@x.com' → 'Jane.Doeblog'; padded to the 3-char minimum."""
    base = _USERNAME_STRIP.sub("", email.split("@", 1)[0])[:40]
    if len(base) < 3:
        base = f"{base}user"
    return base


class UserService:
    async def signup(
        self,
        db: AsyncSession,
        authenticator: Authenticator,
        request: SignupRequest,
    ) -> UserResponse:
        """
        Register a new user.

        Raises:
            AlreadyExistsError: email or explicit username already taken (→ 400)
            ValidationError:    password over bcrypt's input limit (→ 400)
        """
        repo = UserRepository(db)
        email = request.email.strip().lower()

        with translate_storage_errors("signup", resource="user"):
            if await repo.email_exists(email):
                raise AlreadyExistsError(resource="user", field="email")

            if request.username:
                username = request.username
                if await repo.username_exists(username):
                    raise AlreadyExistsError(resource="user", field="username")
            else:
                username = derive_username(email)
                while await repo.username_exists(username):
                    username = f"{derive_username(email)}-{secrets.token_hex(3)}"

            user = User(
                username=username,
                email=email,
                password_hash=authenticator.hash_password(request.password),
                bio=request.bio,
                profile_pic=request.profile_pic,
            )
            await repo.add(user)

        logger.info("User %s signed up (id=%s)", user.username, user.id)
        return UserResponse.model_validate(user)

    async def get_profile(self, db: AsyncSession, identity: Identity) -> UserResponse:
        with translate_storage_errors("get_profile"):
            user = await UserRepository(db).get_by_id(identity.id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=identity.id)
        return UserResponse.model_validate(user)

    async def update_profile(
        self,
        db: AsyncSession,
        identity: Identity,
        request: ProfileUpdateRequest,
    ) -> UserResponse:
        """
        Apply the fields present in the body; omitted fields stay unchanged.

        An explicit null clears bio or profile_pic. A null username is ignored.
        """
        repo = UserRepository(db)
        changes = request.model_dump(include=request.model_fields_set)
        if changes.get("username") is None:
            changes.pop("username", None)
        for field in CLEARABLE_PROFILE_FIELDS:
            if field in changes and changes[field] is None:
                changes[field] = ""

        with translate_storage_errors("update_profile", resource="user", field="username"):
            user = await repo.get_by_id(identity.id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=identity.id)

            username = changes.get("username")
            if username and username != user.username:
                if await repo.username_exists(username, exclude_id=user.id):
                    raise AlreadyExistsError(resource="user", field="username")

            for field, value in changes.items():
                setattr(user, field, value)
            await repo.save(user)

        logger.info("User %s updated profile fields: %s", user.id, sorted(changes))
        return UserResponse.model_validate(user)

    async def get_user(self, db: AsyncSession, user_id: int) -> UserPublic:
        with translate_storage_errors("get_user"):
            user = await UserRepository(db).get_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserPublic.model_validate(user)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
