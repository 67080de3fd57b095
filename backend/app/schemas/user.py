"""
Blog API — User & Auth Schemas
================================

What:  Signup/login request bodies, the token response and user views.

User views:
    UserResponse  the caller's own profile (includes email)
    UserPublic    what other users see, and what is embedded as `author`
                  in posts and comments
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,50}$")


def _check_username(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not USERNAME_PATTERN.match(v):
        raise ValueError(
            "Username must be 3-50 characters of letters, digits, '_', '.' or '-'"
        )
    return v


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SignupRequest(BaseModel):
    """
    Body of POST /signup.

    username is optional; when omitted one is derived from the email's
    local part.
    """
    username: Optional[str] = Field(default=None, description="Unique public handle")
    email: EmailStr = Field(description="Unique email address, used to log in")
    password: str = Field(min_length=6, max_length=72, description="Plaintext password")
    bio: str = Field(default="", max_length=2000)
    profile_pic: str = Field(default="", max_length=512)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return _check_username(v)


class LoginRequest(BaseModel):
    email: EmailStr
    # No length bounds: any wrong password, empty or over-long, is a 401.
    password: str


class ProfileUpdateRequest(BaseModel):
    """
    Body of PUT /profile.

    Omitted fields are left unchanged; an explicit null clears bio or
    profile_pic.
    """
    username: Optional[str] = Field(default=None)
    bio: Optional[str] = Field(default=None, max_length=2000)
    profile_pic: Optional[str] = Field(default=None, max_length=512)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return _check_username(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TokenResponse(BaseModel):
    """Returned by POST /login."""
    access_token: str = Field(description="Signed session token")
    token_type: str = Field(default="bearer")
    expires_at: datetime = Field(description="Absolute expiry instant (UTC)")


class UserPublic(BaseModel):
    id: int
    username: str
    bio: str = ""
    profile_pic: str = ""

    model_config = {"from_attributes": True}


class UserResponse(UserPublic):
    email: str
    created_at: datetime
