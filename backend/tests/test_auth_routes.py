"""
Blog API — Signup, Login & Profile Endpoint Tests
===================================================

What we test:
    ✅ signup(a@x.com, secret) → 201; login → 200 with token; wrong password → 401
    ✅ Duplicate email / username → 400 already_exists
    ✅ Missing, malformed and garbage tokens → 401 with WWW-Authenticate
    ✅ No response ever contains the password or its hash
    ✅ Profile read/update and public user view
"""

import pytest

API = "/api/v1"


class TestSignupAndLogin:
    @pytest.mark.asyncio
    async def test_signup_login_scenario(self, client):
        signup = await client.post(f"{API}/signup", json={"email": "a@x.com", "password": "secret"})
        assert signup.status_code == 201
        user = signup.json()
        assert user["email"] == "a@x.com"
        assert user["username"] == "auser"

        login = await client.post(f"{API}/login", json={"email": "a@x.com", "password": "secret"})
        assert login.status_code == 200
        body = login.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"].count(".") == 2
        assert body["expires_at"]

        wrong = await client.post(f"{API}/login", json={"email": "a@x.com", "password": "nope"})
        assert wrong.status_code == 401
        assert wrong.json()["error"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_unknown_email_matches_wrong_password(self, client, register_user):
        await register_user("a@x.com")
        wrong = await client.post(f"{API}/login", json={"email": "a@x.com", "password": "nope"})
        unknown = await client.post(f"{API}/login", json={"email": "z@x.com", "password": "nope"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"]

    @pytest.mark.asyncio
    async def test_login_email_is_case_insensitive(self, client, register_user):
        await register_user("a@x.com")
        login = await client.post(f"{API}/login", json={"email": "A@X.COM", "password": "secret"})
        assert login.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["", "x" * 73, "secret" + "x" * 100])
    async def test_any_wrong_password_is_401(self, client, register_user, password):
        await register_user("a@x.com")
        login = await client.post(f"{API}/login", json={"email": "a@x.com", "password": password})
        assert login.status_code == 401
        assert login.json()["error"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_byte_limit_password_rejects_longer_input(self, client, register_user):
        stored = "é" * 36  # 72 bytes in UTF-8
        await register_user("a@x.com", password=stored)
        login = await client.post(
            f"{API}/login", json={"email": "a@x.com", "password": stored + "x"}
        )
        assert login.status_code == 401

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, client, register_user):
        await register_user("a@x.com")
        response = await client.post(f"{API}/signup", json={"email": "A@x.com", "password": "secret"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "already_exists"
        assert body["details"]["field"] == "email"

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, client, register_user):
        await register_user("a@x.com", username="writer")
        response = await client.post(
            f"{API}/signup",
            json={"email": "b@x.com", "password": "secret", "username": "writer"},
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "username"

    @pytest.mark.asyncio
    async def test_derived_username_collision_gets_suffix(self, client, register_user):
        first, _ = await register_user("sam@x.com")
        second, _ = await register_user("sam@y.com")
        assert first["username"] == "sam"
        assert second["username"].startswith("sam-")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "password": "secret"},
            {"email": "a@x.com", "password": "123"},
            {"email": "a@x.com"},
            {"email": "a@x.com", "password": "secret", "username": "no spaces"},
        ],
    )
    async def test_invalid_signup_is_400(self, client, body):
        response = await client.post(f"{API}/signup", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_password_never_serialized(self, client, register_user):
        user, headers = await register_user("a@x.com", password="hunter22")
        profile = await client.get(f"{API}/profile", headers=headers)
        bad = await client.post(f"{API}/signup", json={"email": "a@x.com", "password": "x"})

        for response_text in (str(user), profile.text, bad.text):
            assert "hunter22" not in response_text
            assert "password_hash" not in response_text
            assert "$2b$" not in response_text


class TestTokenGuard:
    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get(f"{API}/profile")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        body = response.json()
        assert body["message"] == "Invalid or expired credentials"
        assert "details" not in body

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "header",
        ["Bearer garbage", "Bearer a.b.c", "Basic YTpi", "Token abc"],
    )
    async def test_bad_authorization_header(self, client, header):
        response = await client.get(f"{API}/posts", headers={"Authorization": header})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired credentials"

    @pytest.mark.asyncio
    async def test_token_from_other_app_rejected(self, client, register_user):
        from app.config import Settings
        from app.services.auth_service import Authenticator, Identity

        user, _ = await register_user("a@x.com")
        foreign = Authenticator(Settings(jwt_secret_key="some-other-deployment-secret-0123456789"))
        token = foreign.issue_token(Identity(id=user["id"], username=user["username"], email=user["email"]))
        response = await client.get(
            f"{API}/profile", headers={"Authorization": f"Bearer {token.token}"}
        )
        assert response.status_code == 401


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_profile(self, client, register_user):
        user, headers = await register_user("a@x.com")
        response = await client.get(f"{API}/profile", headers=headers)
        assert response.status_code == 200
        assert response.json()["id"] == user["id"]
        assert response.json()["email"] == "a@x.com"

    @pytest.mark.asyncio
    async def test_update_profile_partial(self, client, register_user):
        _, headers = await register_user("a@x.com")
        response = await client.put(
            f"{API}/profile", json={"bio": "Writes about Python"}, headers=headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["bio"] == "Writes about Python"
        assert body["username"] == "auser"

        response = await client.put(f"{API}/profile", json={"username": "alice"}, headers=headers)
        assert response.json()["username"] == "alice"
        assert response.json()["bio"] == "Writes about Python"

    @pytest.mark.asyncio
    async def test_null_clears_bio_and_picture(self, client, register_user):
        _, headers = await register_user("a@x.com")
        await client.put(
            f"{API}/profile",
            json={"bio": "Hello", "profile_pic": "https://img.example/a.png"},
            headers=headers,
        )
        response = await client.put(
            f"{API}/profile", json={"bio": None, "profile_pic": None, "username": None},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["bio"] == ""
        assert body["profile_pic"] == ""
        assert body["username"] == "auser"

    @pytest.mark.asyncio
    async def test_update_to_taken_username(self, client, register_user):
        await register_user("a@x.com", username="alice")
        _, bob_headers = await register_user("b@x.com", username="bob")
        response = await client.put(f"{API}/profile", json={"username": "alice"}, headers=bob_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "already_exists"

    @pytest.mark.asyncio
    async def test_public_user_view_hides_email(self, client, register_user):
        alice, _ = await register_user("a@x.com")
        _, bob_headers = await register_user("b@x.com")
        response = await client.get(f"{API}/users/{alice['id']}", headers=bob_headers)
        assert response.status_code == 200
        assert response.json()["username"] == alice["username"]
        assert "email" not in response.json()

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client, register_user):
        _, headers = await register_user("a@x.com")
        response = await client.get(f"{API}/users/9999", headers=headers)
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
