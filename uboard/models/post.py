"""Post model (bulletin posts and capacity-bounded Events) and tags."""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Table, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from uboard.db.session import Base

EVENT_TYPE = "Events"

TYPE_MAX_LENGTH = 50
TITLE_MAX_LENGTH = 200
LOCATION_MAX_LENGTH = 255
TAG_MAX_LENGTH = 64

post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    text = Column(String(TAG_MAX_LENGTH), unique=True, nullable=False)

    posts = relationship("Post", secondary=post_tags, back_populates="tags")


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(String(TYPE_MAX_LENGTH), nullable=False, index=True)  # "Events" or a free-form category
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    body = Column(Text, nullable=False)
    thumbnail = Column(Text, nullable=True)
    location = Column(String(LOCATION_MAX_LENGTH), nullable=False, default="")
    capacity = Column(Integer, nullable=False, default=0)  # 0 for posts without check-in
    coords = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)  # {"lat": .., "lng": ..}
    feedback_score = Column(Integer, nullable=False, default=0)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="posts")
    tags = relationship("Tag", secondary=post_tags, back_populates="posts", order_by="Tag.text")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    likes = relationship("UserPostLike", back_populates="post", cascade="all, delete-orphan")
    checkins = relationship("UserCheckin", back_populates="post", cascade="all, delete-orphan")
    reports = relationship("UserReport", back_populates="post", cascade="all, delete-orphan")
