"""
Blog API — User Repository (Credential Store)
===============================================
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        # Emails are stored lower-cased.
        result = await self.session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(func.count(User.id)).where(User.email == email.strip().lower())
        )
        return bool(result.scalar())

    async def username_exists(self, username: str, exclude_id: Optional[int] = None) -> bool:
        query = select(func.count(User.id)).where(User.username == username)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.session.execute(query)
        return bool(result.scalar())

    async def add(self, user: User) -> User:
        """Insert and flush so the autoincrement id is assigned."""
        self.session.add(user)
        await self.session.flush()
        return user

    async def save(self, user: User) -> User:
        await self.session.flush()
        return user
