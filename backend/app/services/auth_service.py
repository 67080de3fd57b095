"""
Blog API — Authenticator
==========================

What:  Password hashing, login credential checks, session token issuance and
       verification, and token → identity resolution.
How:   bcrypt for passwords, PyJWT (HMAC) for tokens. An `Authenticator` is
       built once from `Settings` in `create_app()` and stored on
       `app.state.authenticator`; the signing secret lives only inside it.
Who:   Used by the login route and by the `require_identity` dependency that
       guards every protected route.

Token format:
    {"sub": "<user id>", "iat": <issued>, "exp": <expiry>}
    Both times are epoch seconds with a fractional part.
    A token issued at T is valid for check times in [T, T + ttl) and invalid
    from T + ttl onwards.

Failure semantics:
    Every verification failure raises the same AuthenticationError with the
    same client-facing message. The precise cause (bad signature, expired,
    malformed, unknown subject, wrong password...) is carried in
    `AuthenticationError.reason` and only ever logged.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.exceptions import AuthenticationError, StorageError, ValidationError
from app.models.user import User
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class Identity:
    """An authenticated user, resolved from a valid token."""
    id: int
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(id=user.id, username=user.username, email=user.email)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    subject: str
    expires_at: datetime


def _as_utc(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Password Hashing
# ══════════════════════════════════════════════════════════════════════════


class PasswordHasher:
    """
    Salted, deliberately slow one-way hashing with bcrypt.

    rounds is the bcrypt cost factor (2^rounds iterations).
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_password(self, plaintext: str) -> str:
        encoded = plaintext.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes long",
                field="password",
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify_password(self, plaintext: str, hashed: str) -> bool:
        """
        Constant-time comparison of a plaintext against a stored hash.

        Fails closed: a malformed hash, an over-long password or any other
        error inside bcrypt counts as a mismatch.
        """
        encoded = plaintext.encode("utf-8")
        # Some bcrypt releases truncate instead of raising; no stored hash can
        # come from an input this long, so it never matches.
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed.encode("ascii"))
        except Exception as e:
            logger.warning("Password verification error treated as mismatch: %s", type(e).__name__)
            return False


# ══════════════════════════════════════════════════════════════════════════
# Authenticator
# ══════════════════════════════════════════════════════════════════════════


class Authenticator:
    """
    Issues and verifies session tokens and checks login credentials.

    Attributes:
        hasher:     PasswordHasher configured with the bcrypt cost factor
        token_ttl:  validity window of issued tokens
    """

    def __init__(self, settings: Settings, hasher: Optional[PasswordHasher] = None):
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self.token_ttl = timedelta(days=settings.token_ttl_days)
        self.hasher = hasher or PasswordHasher(rounds=settings.bcrypt_rounds)
        self._dummy_hash: Optional[str] = None

    def __repr__(self) -> str:
        return f"<Authenticator(algorithm='{self._algorithm}', ttl={self.token_ttl})>"

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, plaintext: str) -> str:
        return self.hasher.hash_password(plaintext)

    def verify_password(self, plaintext: str, hashed: str) -> bool:
        return self.hasher.verify_password(plaintext, hashed)

    def _burn_password_check(self, plaintext: str) -> None:
        # Unknown emails still pay for one bcrypt check so response timing
        # does not reveal which emails are registered.
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash_password("not-a-real-password")
        self.hasher.verify_password(plaintext, self._dummy_hash)

    # ── Tokens ────────────────────────────────────────────────────────────

    def issue_token(self, identity: Identity, now: Optional[datetime] = None) -> IssuedToken:
        """
        Sign a token for `identity` valid from `now` for `token_ttl`.

        `iat` and `exp` are fractional epoch seconds (a NumericDate may carry
        a fraction), so the window is exact to the microsecond.
        """
        issued_at = _as_utc(now)
        expires_at = issued_at + self.token_ttl
        subject = str(identity.id)
        payload = {
            "sub": subject,
            "iat": issued_at.timestamp(),
            "exp": expires_at.timestamp(),
        }
        token = jwt.encode(payload, self._secret.get_secret_value(), algorithm=self._algorithm)
        return IssuedToken(token=token, subject=subject, expires_at=expires_at)

    def verify_token(self, token: str, now: Optional[datetime] = None) -> str:
        """
        Verify signature, structure and expiry; return the subject claim.

        Raises:
            AuthenticationError: for every kind of invalid token
        """
        try:
            claims = jwt.decode(
                token,
                self._secret.get_secret_value(),
                algorithms=[self._algorithm],
                # Expiry is checked below against the caller's clock.
                options={"require": ["sub", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError:
            raise AuthenticationError(reason="bad_signature")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(reason=f"malformed_token:{type(e).__name__}")

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise AuthenticationError(reason="malformed_token:exp")
        if _as_utc(now).timestamp() >= exp:
            raise AuthenticationError(reason="expired")

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise AuthenticationError(reason="malformed_token:sub")
        return subject

    async def resolve_identity(
        self,
        db: AsyncSession,
        token: str,
        now: Optional[datetime] = None,
    ) -> Identity:
        """
        Verify `token` and load the user it was issued for.

        A subject with no stored user is an authentication failure, never an
        empty identity.
        """
        subject = self.verify_token(token, now)
        try:
            user_id = int(subject)
        except ValueError:
            raise AuthenticationError(reason="malformed_token:sub")

        try:
            user = await UserRepository(db).get_by_id(user_id)
        except SQLAlchemyError as e:
            logger.error("Database error resolving token subject %s: %s", subject, e)
            raise StorageError(context={"operation": "resolve_identity"}) from e

        if user is None:
            raise AuthenticationError(reason="unknown_subject", context={"subject": subject})
        return Identity.from_user(user)

    # ── Login ─────────────────────────────────────────────────────────────

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Check login credentials.

        Unknown email and wrong password raise the same AuthenticationError.
        """
        try:
            user = await UserRepository(db).get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("Database error during login lookup: %s", e)
            raise StorageError(context={"operation": "authenticate"}) from e

        if user is None:
            self._burn_password_check(password)
            raise AuthenticationError(reason="unknown_email")
        if not self.verify_password(password, user.password_hash):
            raise AuthenticationError(reason="bad_password", context={"user_id": user.id})
        return user
