"""
Blog API — User SQLAlchemy Model
==================================

What:  ORM model for the `users` table (the credential store).
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.

Table Design:
    - username / email: unique constraints; signup races are settled by the DB
    - password_hash: bcrypt output only. There is no column for the plaintext
      and no response schema exposes this one.
    - bio / profile_pic: optional profile fields, empty string when unset
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered author/reader.

    Lifecycle:
        1. Created at signup with a bcrypt hash of the chosen password
        2. Profile fields mutated through PUT /profile
        3. Never hard-deleted
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    # Stored lower-cased so uniqueness is case-insensitive.
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # bcrypt hashes are 60 characters ($2b$ + cost + 22 salt + 31 hash).
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    profile_pic: Mapped[str] = mapped_column(String(512), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        # password_hash intentionally omitted
        return f"<User(id={self.id}, username='{self.username}')>"
