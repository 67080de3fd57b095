"""
Blog API — Database Session Management
========================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   `Database` owns an async engine with connection pooling and a session
       factory. One instance is built from `Settings` inside `create_app()` and
       stored on `app.state.db`. `get_db_session` hands each request its own
       session that commits on success and rolls back on error.

Connection Pooling:
    pool_size=20, max_overflow=10: at most 30 PostgreSQL connections per worker.
    pool_pre_ping:     validates connections before use.
    pool_recycle=3600: recycles connections every hour.

    SQLite (tests) uses a StaticPool instead so that every session of the
    in-memory database shares the same underlying connection.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which Alembic and
    `Database.create_all()` read.
    """
    pass


class Database:
    """
    Engine plus session factory for one configured database.

    Attributes:
        engine:          AsyncEngine managing the connection pool
        session_factory: async_sessionmaker producing per-request sessions
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        self.engine: AsyncEngine = self._build_engine(settings)
        # expire_on_commit=False: response models read attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _build_engine(settings: Settings) -> AsyncEngine:
        echo = settings.log_level == "DEBUG"
        if settings.is_sqlite:
            return create_async_engine(
                settings.database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo,
            )
        return create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            echo=echo,
        )

    async def ping(self) -> None:
        """Runs SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Creates every table registered on `Base.metadata` that is missing."""
        # Model modules must be imported so their tables are registered.
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Closes all pooled connections. Called during application shutdown."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's session factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
