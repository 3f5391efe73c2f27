"""Tag resolution and post/tag linking."""
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.models.post import Tag, post_tags
from uboard.repositories.engagement import insert_ignoring_conflicts


class TagRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, texts: list[str]) -> list[Tag]:
        """Return the tags for ``texts``, creating the ones that do not exist yet."""
        if not texts:
            return []
        await self.db.execute(
            insert_ignoring_conflicts(self.db, Tag).values([{"id": uuid4(), "text": text} for text in texts])
        )
        result = await self.db.execute(select(Tag).where(Tag.text.in_(texts)))
        return list(result.scalars().all())

    async def link(self, post_id: UUID, tags: list[Tag]) -> None:
        if not tags:
            return
        await self.db.execute(
            insert_ignoring_conflicts(self.db, post_tags).values(
                [{"post_id": post_id, "tag_id": tag.id} for tag in tags]
            )
        )
