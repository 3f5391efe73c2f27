"""Comment persistence."""
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from uboard.models.comment import Comment


class CommentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, comment_id: UUID) -> Comment | None:
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id).options(selectinload(Comment.author))
        )
        return result.scalar_one_or_none()

    async def list_for_post(self, post_id: UUID, limit: int, offset: int) -> list[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(desc(Comment.created_at))
            .offset(offset)
            .limit(limit)
            .options(selectinload(Comment.author))
        )
        return list(result.scalars().all())

    async def count_for_post(self, post_id: UUID) -> int:
        result = await self.db.execute(select(func.count(Comment.id)).where(Comment.post_id == post_id))
        return result.scalar() or 0

    async def create(self, body: str, author_id: UUID, post_id: UUID) -> Comment:
        comment = Comment(body=body, author_id=author_id, post_id=post_id)
        self.db.add(comment)
        await self.db.flush()
        return await self.get(comment.id)

    async def save(self, comment: Comment) -> Comment:
        await self.db.flush()
        return comment

    async def delete(self, comment: Comment) -> None:
        await self.db.delete(comment)
        await self.db.flush()
