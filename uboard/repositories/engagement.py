"""Idempotent (user_id, post_id) join-table managers: likes, check-ins and reports."""
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.models.engagement import UserCheckin, UserPostLike, UserReport


def insert_ignoring_conflicts(db: AsyncSession, table):
    """``INSERT ... ON CONFLICT DO NOTHING`` for the session's dialect."""
    dialect = db.get_bind().dialect.name
    insert = pg_insert if dialect == "postgresql" else sqlite_insert
    return insert(table).on_conflict_do_nothing()


class UserPostRepository:
    model = None

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, user_id: UUID, post_id: UUID) -> bool:
        """Insert the row unless it exists. True once the row is present."""
        await self.db.execute(insert_ignoring_conflicts(self.db, self.model).values(user_id=user_id, post_id=post_id))
        return True

    async def remove(self, user_id: UUID, post_id: UUID) -> bool:
        """Delete the row. True only if a row was removed."""
        result = await self.db.execute(
            delete(self.model).where(self.model.user_id == user_id, self.model.post_id == post_id)
        )
        return (result.rowcount or 0) > 0

    async def count(self, post_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(self.model.post_id == post_id)
        )
        return result.scalar() or 0

    async def exists(self, user_id: UUID, post_id: UUID) -> bool:
        result = await self.db.execute(
            select(self.model.user_id).where(self.model.user_id == user_id, self.model.post_id == post_id)
        )
        return result.first() is not None


class LikeRepository(UserPostRepository):
    model = UserPostLike


class CheckinRepository(UserPostRepository):
    model = UserCheckin


class ReportRepository(UserPostRepository):
    model = UserReport

    async def report(self, user_id: UUID, post_id: UUID) -> int:
        """Record the user's report and return the post's cumulative report count."""
        await self.add(user_id, post_id)
        return await self.count(post_id)
