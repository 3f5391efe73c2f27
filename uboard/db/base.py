"""SQLAlchemy declarative base and model imports for Alembic."""
from uboard.db.session import Base  # noqa: F401
from uboard.models.user import User  # noqa: F401
from uboard.models.post import Post, Tag, post_tags  # noqa: F401
from uboard.models.comment import Comment  # noqa: F401
from uboard.models.engagement import UserCheckin, UserPostLike, UserReport  # noqa: F401

__all__ = ["Base", "User", "Post", "Tag", "post_tags", "Comment", "UserPostLike", "UserCheckin", "UserReport"]
