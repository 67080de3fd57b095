"""
Blog API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets a fresh application wired to its own in-memory SQLite
       database (aiosqlite + StaticPool), with the schema created up front.
       Requests go through httpx's ASGITransport; no server is started.

Fixture Hierarchy (all function-scoped):
    settings
    └── app                 create_app(settings) + create_all()
        ├── client          httpx AsyncClient bound to the app
        ├── db_session      AsyncSession on the app's database
        └── authenticator   the app's Authenticator
    register_user           factory: signup + login → (user json, auth headers)
"""

import os

# Test configuration must be in the environment before any app import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Dict, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402

API = "/api/v1"
DEFAULT_PASSWORD = "secret"


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.db.create_all()
    yield application
    await application.state.db.dispose()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.db.session_factory() as session:
        yield session


@pytest.fixture
def authenticator(app):
    return app.state.authenticator


@pytest.fixture
def register_user(client):
    """
    Factory fixture: sign a user up, log them in, return (user, headers).

    Usage:
        user, headers = await register_user("a@x.com")
        await client.get(f"{API}/profile", headers=headers)
    """

    async def _register(
        email: str,
        password: str = DEFAULT_PASSWORD,
        username: str = None,
    ) -> Tuple[dict, Dict[str, str]]:
        body = {"email": email, "password": password}
        if username:
            body["username"] = username
        signup = await client.post(f"{API}/signup", json=body)
        assert signup.status_code == 201, signup.text

        login = await client.post(f"{API}/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return signup.json(), {"Authorization": f"Bearer {token}"}

    return _register
