from uboard.models.user import User
from uboard.models.post import Post, Tag, post_tags
from uboard.models.comment import Comment
from uboard.models.engagement import UserCheckin, UserPostLike, UserReport

__all__ = ["User", "Post", "Tag", "post_tags", "Comment", "UserPostLike", "UserCheckin", "UserReport"]
