"""Post domain controller: creation, aggregated reads, votes, reports and check-ins."""
import logging
from uuid import UUID

from uboard.controllers.base import page_size, parse_id, store_guard
from uboard.core.errors import (
    CapacityExceededError,
    NothingToUndoError,
    NotFoundError,
    UnauthorizedError,
    UploadDisabledError,
    ValidationError,
)
from uboard.models.post import (
    EVENT_TYPE,
    LOCATION_MAX_LENGTH,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TYPE_MAX_LENGTH,
)
from uboard.repositories.engagement import CheckinRepository, LikeRepository, ReportRepository
from uboard.repositories.post import PostRepository
from uboard.repositories.tag import TagRepository
from uboard.schemas.common import Envelope
from uboard.schemas.post import Coords, ReportResult
from uboard.services.aggregation import to_read
from uboard.services.storage_service import FileManager, UploadedFile

logger = logging.getLogger(__name__)

# The number of distinct reports after which a post is removed.
MAX_REPORTS = 3

MAX_TAGS = 3


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Trim, drop blanks and duplicates, keep the first MAX_TAGS."""
    seen: list[str] = []
    for tag in tags or []:
        text = tag.strip()
        if len(text) > TAG_MAX_LENGTH:
            raise ValidationError(f"Tags are limited to {TAG_MAX_LENGTH} characters.")
        if text and text not in seen:
            seen.append(text)
    return seen[:MAX_TAGS]


def _check_lengths(**fields: tuple[str | None, int]) -> None:
    for name, (value, limit) in fields.items():
        if value is not None and len(value) > limit:
            raise ValidationError(f"The {name} is limited to {limit} characters.")


def _coords_value(coords: Coords | dict | None) -> dict | None:
    if coords is None:
        return None
    if isinstance(coords, Coords):
        return coords.model_dump()
    return Coords(**coords).model_dump()


class PostController:
    def __init__(
        self,
        posts: PostRepository,
        likes: LikeRepository,
        checkins: CheckinRepository,
        reports: ReportRepository,
        tags: TagRepository,
        files: FileManager,
    ):
        self.posts = posts
        self.likes = likes
        self.checkins = checkins
        self.reports = reports
        self.tags = tags
        self.files = files

    async def get_posts(self, user_id: str | UUID, post_type: str, limit: int, offset: int) -> Envelope:
        """Newest-first page of posts with derived fields, plus the unpaginated total."""
        uid = parse_id(user_id, "User")
        with store_guard("list posts", post_type):
            results = await self.posts.list_previews(uid, post_type, page_size(limit), offset)
            total = await self.posts.count(post_type)
        return Envelope.of(200 if results else 204, result=results, count=len(results), total=total)

    async def get_user_posts(
        self,
        user_id: str | UUID,
        query_user_id: str | UUID,
        post_type: str,
        limit: int,
        offset: int,
    ) -> Envelope:
        """Same as get_posts, restricted to the posts written by ``query_user_id``."""
        uid = parse_id(user_id, "User")
        author_id = parse_id(query_user_id, "User")
        with store_guard("list user posts", author_id):
            results = await self.posts.list_previews(uid, post_type, page_size(limit), offset, author_id=author_id)
            total = await self.posts.count(post_type, author_id=author_id)
        return Envelope.of(200 if results else 204, result=results, count=len(results), total=total)

    async def search_posts(
        self,
        user_id: str | UUID,
        post_type: str,
        query: str,
        limit: int,
        offset: int,
    ) -> Envelope:
        """Ranked full-text search over title, author, tags, location and body."""
        uid = parse_id(user_id, "User")
        if not query or not query.strip():
            raise ValidationError("Missing search query.")
        with store_guard("search posts", query):
            results = await self.posts.search(uid, post_type, query, page_size(limit), offset)
            total = await self.posts.count_search(post_type, query)
        return Envelope.of(200 if results else 204, result=results, count=len(results), total=total)

    async def get_post(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        with store_guard("get post", pid):
            detail = await self.posts.get_detail(uid, pid)
        if detail is None:
            raise NotFoundError(f"Post {post_id} could not be found")
        return Envelope.of(200, result=detail)

    async def create_post(
        self,
        user_id: str | UUID,
        post_type: str | None = None,
        title: str | None = None,
        body: str | None = None,
        location: str | None = None,
        capacity: int | None = None,
        tags: list[str] | None = None,
        coords: Coords | dict | None = None,
        file: UploadedFile | None = None,
    ) -> Envelope:
        author_id = parse_id(user_id, "User")
        location = location or ""
        if not post_type or not title or not body or capacity is None:
            raise ValidationError("Missing fields.")
        if post_type == EVENT_TYPE and not location.strip():
            raise ValidationError("Missing fields.")
        _check_lengths(
            type=(post_type, TYPE_MAX_LENGTH),
            title=(title, TITLE_MAX_LENGTH),
            location=(location, LOCATION_MAX_LENGTH),
        )
        if capacity < 0:
            raise ValidationError("Capacity cannot be negative.")
        tag_texts = normalize_tags(tags)

        thumbnail = None
        if file is not None:
            # A post can always be created without a file, never by dropping one.
            if not self.files.status():
                raise UploadDisabledError(
                    "Thumbnail uploads are temporarily disabled. Remove the thumbnail and try again."
                )
            thumbnail = self.files.upload(file.path, file.filename)

        with store_guard("create the new post", author_id):
            post = await self.posts.create(
                type=post_type,
                title=title,
                body=body,
                location=location,
                capacity=capacity,
                coords=_coords_value(coords),
                author_id=author_id,
                thumbnail=thumbnail,
            )
            await self.tags.link(post.id, await self.tags.resolve(tag_texts))
        logger.info("Post %s created by %s", post.id, author_id)
        return Envelope.of(201, result=to_read(post))

    async def update_post(
        self,
        user_id: str | UUID,
        post_id: str | UUID,
        title: str | None = None,
        body: str | None = None,
        location: str | None = None,
        capacity: int | None = None,
        coords: Coords | dict | None = None,
    ) -> Envelope:
        """Author-only partial update.

        Omitted fields keep their values. Blank text and a zero capacity count
        as omitted, so an Event never loses its location or its capacity.
        """
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        with store_guard("find post", pid):
            post = await self.posts.get(pid)
        if post is None:
            raise NotFoundError("Could not find post.")
        if post.author_id != uid:
            raise UnauthorizedError("Not authorized to edit this post.")
        if capacity is not None and capacity < 0:
            raise ValidationError("Capacity cannot be negative.")
        _check_lengths(title=(title, TITLE_MAX_LENGTH), location=(location, LOCATION_MAX_LENGTH))

        if title and title.strip():
            post.title = title
        if body and body.strip():
            post.body = body
        if location and location.strip():
            post.location = location
        if capacity:
            post.capacity = capacity
        if coords is not None:
            post.coords = _coords_value(coords)
        with store_guard("update post", pid):
            await self.posts.flush(post)
        return Envelope.of(200, result=to_read(post))

    async def delete_post(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        with store_guard("find post", pid):
            post = await self.posts.get(pid)
        if post is None:
            raise NotFoundError(f"Post {post_id} could not be deleted.")
        if post.author_id != uid:
            raise UnauthorizedError("Unauthorized to delete the post.")
        with store_guard("delete post", pid):
            await self.posts.delete(post)
        return Envelope.of(204)

    async def _require_post(self, pid: UUID) -> None:
        with store_guard("find post", pid):
            found = await self.posts.exists(pid)
        if not found:
            raise NotFoundError("Could not find post.")

    async def upvote(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        """Like the post. Repeated upvotes are no-ops."""
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        await self._require_post(pid)
        with store_guard("like the post", pid):
            await self.likes.add(uid, pid)
        return Envelope.of(204)

    async def downvote(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        with store_guard("unlike the post", pid):
            removed = await self.likes.remove(uid, pid)
        if not removed:
            raise NothingToUndoError(f"Could not unlike the post: {post_id}")
        return Envelope.of(204)

    async def report(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        """Record a report; the post is deleted once MAX_REPORTS users reported it."""
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        await self._require_post(pid)
        with store_guard("report the post", pid):
            count = await self.reports.report(uid, pid)
            if count >= MAX_REPORTS:
                post = await self.posts.get(pid)
                # A concurrent final report may already have removed it.
                if post is not None:
                    await self.posts.delete(post)
        if count >= MAX_REPORTS:
            logger.info("Post %s removed after %d reports", pid, count)
            return Envelope.of(
                200,
                message="Post has been deleted",
                result=ReportResult(report_count=count, deleted=True),
            )
        return Envelope.of(201, message="Report recorded", result=ReportResult(report_count=count))

    async def checkin(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        """Check the user in, unless the event is already at capacity.

        The post row stays locked until the transaction ends, so concurrent
        check-ins against the same event are counted one after the other.
        """
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        with store_guard("check-in to the event", pid):
            post = await self.posts.get_for_update(pid)
            if post is None:
                raise NotFoundError(f"Post {post_id} could not be found")
            checked_in = await self.checkins.count(pid)
            if checked_in + 1 > post.capacity:
                raise CapacityExceededError(f"Could not check-in to the event: {post_id}")
            await self.checkins.add(uid, pid)
        return Envelope.of(204)

    async def checkout(self, user_id: str | UUID, post_id: str | UUID) -> Envelope:
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        with store_guard("check-out of the event", pid):
            removed = await self.checkins.remove(uid, pid)
        if not removed:
            raise NothingToUndoError(f"Could not check-out of the event: {post_id}")
        return Envelope.of(204)
