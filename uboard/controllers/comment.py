"""Comment domain controller."""
from uuid import UUID

from uboard.controllers.base import page_size, parse_id, store_guard
from uboard.core.errors import NotFoundError, UnauthorizedError, ValidationError
from uboard.models.comment import Comment
from uboard.repositories.comment import CommentRepository
from uboard.repositories.post import PostRepository
from uboard.schemas.comment import CommentResponse
from uboard.schemas.common import Envelope


class CommentController:
    def __init__(self, comments: CommentRepository, posts: PostRepository):
        self.comments = comments
        self.posts = posts

    async def _require_post(self, pid: UUID, post_id) -> None:
        with store_guard("find post", pid):
            found = await self.posts.exists(pid)
        if not found:
            raise NotFoundError(f"Post {post_id} could not be found")

    async def _find(self, comment_id: str | UUID) -> Comment | None:
        cid = parse_id(comment_id, "Comment")
        with store_guard("find comment", cid):
            return await self.comments.get(cid)

    async def get_comments(self, post_id: str | UUID, limit: int, offset: int) -> Envelope:
        """Newest-first comments on a post, with their authors' names."""
        pid = parse_id(post_id, "Post")
        await self._require_post(pid, post_id)
        with store_guard("list comments", pid):
            comments = await self.comments.list_for_post(pid, page_size(limit), offset)
            total = await self.comments.count_for_post(pid)
        result = [CommentResponse.model_validate(c) for c in comments]
        return Envelope.of(200, result=result, count=len(result), total=total)

    async def get_comment(self, comment_id: str | UUID) -> Envelope:
        comment = await self._find(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment {comment_id} could not be found")
        return Envelope.of(200, result=CommentResponse.model_validate(comment))

    async def create_comment(
        self,
        body: str | None,
        user_id: str | UUID | None,
        post_id: str | UUID | None,
    ) -> Envelope:
        # Body length is checked by CommentCreate at the HTTP boundary.
        if not body or not user_id or not post_id:
            raise ValidationError("Missing fields.")
        uid = parse_id(user_id, "User")
        pid = parse_id(post_id, "Post")
        await self._require_post(pid, post_id)
        with store_guard("create the new comment", pid):
            comment = await self.comments.create(body, uid, pid)
        return Envelope.of(201, result=CommentResponse.model_validate(comment))

    async def update_comment(self, user_id: str | UUID, comment_id: str | UUID, body: str | None = None) -> Envelope:
        uid = parse_id(user_id, "User")
        comment = await self._find(comment_id)
        if comment is None:
            raise NotFoundError("Could not find comment.")
        if comment.author_id != uid:
            raise UnauthorizedError("Not authorized to edit this comment.")
        if body is not None:
            comment.body = body
        with store_guard("update comment", comment_id):
            await self.comments.save(comment)
        return Envelope.of(200, result=CommentResponse.model_validate(comment))

    async def delete_comment(self, user_id: str | UUID, comment_id: str | UUID) -> Envelope:
        uid = parse_id(user_id, "User")
        comment = await self._find(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment {comment_id} could not be deleted.")
        if comment.author_id != uid:
            raise UnauthorizedError("Unauthorized to delete the comment.")
        with store_guard("delete comment", comment_id):
            await self.comments.delete(comment)
        return Envelope.of(204)
