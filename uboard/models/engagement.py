"""Engagement join tables keyed by (user_id, post_id): likes, check-ins and reports."""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from uboard.db.session import Base


class UserPostLike(Base):
    __tablename__ = "user_post_likes"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    post = relationship("Post", back_populates="likes")


class UserCheckin(Base):
    __tablename__ = "user_checkins"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    post = relationship("Post", back_populates="checkins")


class UserReport(Base):
    """One report per user per post. Rows accumulate until the post is removed."""

    __tablename__ = "user_reports"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    post = relationship("Post", back_populates="reports")
