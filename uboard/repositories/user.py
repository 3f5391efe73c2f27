"""User lookups and account writes."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.models.user import User


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_user_name(self, user_name: str) -> User | None:
        result = await self.db.execute(select(User).where(User.user_name == user_name))
        return result.scalar_one_or_none()

    async def get_by_confirmation_token(self, token: str) -> User | None:
        result = await self.db.execute(select(User).where(User.confirmation_token == token))
        return result.scalar_one_or_none()

    async def create(self, **values) -> User:
        user = User(**values)
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def update(self, user: User, **values) -> User:
        for key, value in values.items():
            setattr(user, key, value)
        await self.db.flush()
        return user
