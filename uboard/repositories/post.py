"""Post persistence and aggregated reads."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.models.post import Post
from uboard.services import aggregation
from uboard.schemas.post import PostDetail, PostPreview


class PostRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, post_id: UUID) -> Post | None:
        return await self.db.get(Post, post_id)

    async def get_for_update(self, post_id: UUID) -> Post | None:
        """Load the post and hold its row lock until the transaction ends."""
        result = await self.db.execute(
            select(Post).where(Post.id == post_id).with_for_update().execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def exists(self, post_id: UUID) -> bool:
        result = await self.db.execute(select(Post.id).where(Post.id == post_id))
        return result.first() is not None

    async def create(self, **values) -> Post:
        post = Post(**values)
        self.db.add(post)
        await self.db.flush()
        await self.db.refresh(post)
        return post

    async def delete(self, post: Post) -> None:
        await self.db.delete(post)
        await self.db.flush()

    async def flush(self, post: Post) -> Post:
        await self.db.flush()
        await self.db.refresh(post)
        return post

    async def get_detail(self, user_id: UUID, post_id: UUID) -> PostDetail | None:
        result = await self.db.execute(aggregation.detail_statement(user_id, post_id))
        row = result.first()
        return aggregation.to_detail(row) if row else None

    async def list_previews(
        self,
        user_id: UUID,
        post_type: str,
        limit: int,
        offset: int,
        author_id: UUID | None = None,
    ) -> list[PostPreview]:
        result = await self.db.execute(aggregation.list_statement(user_id, post_type, limit, offset, author_id))
        return [aggregation.to_preview(row) for row in result.all()]

    async def count(self, post_type: str, author_id: UUID | None = None) -> int:
        result = await self.db.execute(aggregation.count_statement(post_type, author_id))
        return result.scalar() or 0

    async def search(self, user_id: UUID, post_type: str, query: str, limit: int, offset: int) -> list[PostPreview]:
        result = await self.db.execute(aggregation.search_statement(user_id, post_type, query, limit, offset))
        return [aggregation.to_preview(row) for row in result.all()]

    async def count_search(self, post_type: str, query: str) -> int:
        result = await self.db.execute(aggregation.search_count_statement(post_type, query))
        return result.scalar() or 0
