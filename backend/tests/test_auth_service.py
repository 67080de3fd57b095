"""
Blog API — Authenticator Unit Tests
=====================================

What we test:
    ✅ Hashing never stores the plaintext; verification accepts/rejects
    ✅ Verification fails closed on malformed hashes
    ✅ Token validity window: valid in [T, T + ttl), invalid from T + ttl
    ✅ Tampered, malformed, wrong-key and claim-less tokens are rejected
    ✅ Token subject resolves to the stored user; unknown subjects fail
    ✅ Login: unknown email and wrong password fail the same way
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.config import Settings
from app.exceptions import AuthenticationError, ValidationError
from app.models.user import User
from app.services.auth_service import Authenticator, Identity, PasswordHasher

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
IDENTITY = Identity(id=1, username="alice", email="a@x.com")


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestPasswordHasher:
    """bcrypt hashing with the test cost factor."""

    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_is_not_plaintext(self):
        hashed = self.hasher.hash_password("secret")
        assert hashed != "secret"
        assert "secret" not in hashed
        assert hashed.startswith("$2")

    def test_hash_is_salted(self):
        assert self.hasher.hash_password("secret") != self.hasher.hash_password("secret")

    def test_verify_correct_password(self):
        hashed = self.hasher.hash_password("secret")
        assert self.hasher.verify_password("secret", hashed) is True

    def test_verify_wrong_password(self):
        hashed = self.hasher.hash_password("secret")
        assert self.hasher.verify_password("Secret", hashed) is False

    def test_verify_fails_closed_on_garbage_hash(self):
        assert self.hasher.verify_password("secret", "not-a-bcrypt-hash") is False

    def test_password_over_72_bytes_rejected(self):
        with pytest.raises(ValidationError) as exc:
            self.hasher.hash_password("é" * 40)  # 80 bytes in UTF-8
        assert exc.value.field == "password"

    def test_longer_input_sharing_a_72_byte_prefix_never_matches(self):
        stored = "é" * 36  # exactly 72 bytes in UTF-8
        hashed = self.hasher.hash_password(stored)
        assert self.hasher.verify_password(stored, hashed) is True
        assert self.hasher.verify_password(stored + "x", hashed) is False


class TestTokens:
    """Issuing and verifying session tokens."""

    def setup_method(self):
        self.settings = Settings()
        self.auth = Authenticator(self.settings)
        self.ttl = timedelta(days=self.settings.token_ttl_days)

    def test_issued_token_carries_subject_and_expiry(self):
        issued = self.auth.issue_token(IDENTITY, now=T0)
        assert issued.subject == "1"
        assert issued.expires_at == T0 + self.ttl

    def test_valid_at_issue_time(self):
        token = self.auth.issue_token(IDENTITY, now=T0).token
        assert self.auth.verify_token(token, now=T0) == "1"

    def test_valid_just_before_expiry(self):
        token = self.auth.issue_token(IDENTITY, now=T0).token
        assert self.auth.verify_token(token, now=T0 + self.ttl - timedelta(seconds=1)) == "1"

    def test_sub_second_issue_time_keeps_full_window(self):
        issued_at = T0 + timedelta(milliseconds=700)
        issued = self.auth.issue_token(IDENTITY, now=issued_at)
        assert issued.expires_at == issued_at + self.ttl
        almost = issued_at + self.ttl - timedelta(milliseconds=500)
        assert self.auth.verify_token(issued.token, now=almost) == "1"
        with pytest.raises(AuthenticationError):
            self.auth.verify_token(issued.token, now=issued_at + self.ttl)

    def test_invalid_at_expiry(self):
        token = self.auth.issue_token(IDENTITY, now=T0).token
        with pytest.raises(AuthenticationError) as exc:
            self.auth.verify_token(token, now=T0 + self.ttl)
        assert exc.value.reason == "expired"

    def test_invalid_after_expiry(self):
        token = self.auth.issue_token(IDENTITY, now=T0).token
        with pytest.raises(AuthenticationError):
            self.auth.verify_token(token, now=T0 + self.ttl + timedelta(days=1))

    def test_naive_now_treated_as_utc(self):
        token = self.auth.issue_token(IDENTITY, now=T0.replace(tzinfo=None)).token
        assert self.auth.verify_token(token, now=T0) == "1"

    def test_tampered_payload_rejected(self):
        token = self.auth.issue_token(IDENTITY, now=T0).token
        header, _, signature = token.split(".")
        forged_payload = _b64({
            "sub": "2",
            "iat": int(T0.timestamp()),
            "exp": int((T0 + self.ttl).timestamp()),
        })
        with pytest.raises(AuthenticationError) as exc:
            self.auth.verify_token(f"{header}.{forged_payload}.{signature}", now=T0)
        assert exc.value.reason == "bad_signature"

    def test_wrong_key_rejected(self):
        other = Authenticator(Settings(jwt_secret_key="another-secret-key-that-is-also-long-enough"))
        token = other.issue_token(IDENTITY, now=T0).token
        with pytest.raises(AuthenticationError):
            self.auth.verify_token(token, now=T0)

    @pytest.mark.parametrize("token", ["", "abc", "not.a.token", "a.b.c.d"])
    def test_malformed_token_rejected(self, token):
        with pytest.raises(AuthenticationError):
            self.auth.verify_token(token, now=T0)

    def test_token_without_exp_rejected(self):
        secret = self.settings.jwt_secret_key.get_secret_value()
        token = jwt.encode({"sub": "1"}, secret, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            self.auth.verify_token(token, now=T0)

    def test_token_without_sub_rejected(self):
        secret = self.settings.jwt_secret_key.get_secret_value()
        token = jwt.encode({"exp": int((T0 + self.ttl).timestamp())}, secret, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            self.auth.verify_token(token, now=T0)

    def test_failures_share_one_message(self):
        token = self.auth.issue_token(IDENTITY, now=T0).token
        messages = set()
        for bad, now in [(token, T0 + self.ttl), ("abc", T0), (token + "x", T0)]:
            with pytest.raises(AuthenticationError) as exc:
                self.auth.verify_token(bad, now=now)
            messages.add(exc.value.message)
        assert messages == {"Invalid or expired credentials"}


class TestIdentityAndLogin:
    """Resolving tokens and checking credentials against the user table."""

    @pytest.mark.asyncio
    async def test_resolve_identity(self, authenticator, db_session):
        user = User(
            username="alice",
            email="a@x.com",
            password_hash=authenticator.hash_password("secret"),
        )
        db_session.add(user)
        await db_session.flush()

        token = authenticator.issue_token(Identity.from_user(user)).token
        identity = await authenticator.resolve_identity(db_session, token)
        assert identity == Identity(id=user.id, username="alice", email="a@x.com")

    @pytest.mark.asyncio
    async def test_unknown_subject_rejected(self, authenticator, db_session):
        token = authenticator.issue_token(Identity(id=999, username="ghost", email="g@x.com")).token
        with pytest.raises(AuthenticationError) as exc:
            await authenticator.resolve_identity(db_session, token)
        assert exc.value.reason == "unknown_subject"

    @pytest.mark.asyncio
    async def test_authenticate(self, authenticator, db_session):
        db_session.add(User(
            username="alice",
            email="a@x.com",
            password_hash=authenticator.hash_password("secret"),
        ))
        await db_session.flush()

        user = await authenticator.authenticate(db_session, "A@X.com", "secret")
        assert user.username == "alice"

        with pytest.raises(AuthenticationError) as wrong_password:
            await authenticator.authenticate(db_session, "a@x.com", "wrong")
        with pytest.raises(AuthenticationError) as unknown_email:
            await authenticator.authenticate(db_session, "nobody@x.com", "secret")

        assert wrong_password.value.reason == "bad_password"
        assert unknown_email.value.reason == "unknown_email"
        assert wrong_password.value.message == unknown_email.value.message
