"""Pydantic schemas for Post."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from uboard.models.post import LOCATION_MAX_LENGTH, TITLE_MAX_LENGTH
from uboard.schemas.user import AuthorPublic


class Coords(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class TagRead(BaseModel):
    tag_id: UUID
    text: str


class PostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    body: str | None = Field(None, min_length=1)
    location: str | None = Field(None, max_length=LOCATION_MAX_LENGTH)
    capacity: int | None = Field(None, ge=0)
    coords: Coords | None = None


class PostRead(BaseModel):
    id: UUID
    type: str
    title: str
    body: str
    thumbnail: str | None = None
    location: str = ""
    capacity: int = 0
    coords: Coords | None = None
    feedback_score: int = 0
    author_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class PostDetail(PostRead):
    """A post with the derived fields computed for the requesting user."""

    like_count: int = 0
    does_user_like: bool = False
    is_user_checked_in: bool = False
    users_checked_in: int = 0
    did_user_report: bool = False
    author: AuthorPublic | None = None
    tags: list[TagRead] = []


class PostPreview(PostDetail):
    total_comments: int = 0
    rank: float | None = None  # Only set by search


class ReportResult(BaseModel):
    report_count: int
    deleted: bool = False
