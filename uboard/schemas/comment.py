"""Pydantic schemas for Comment."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from uboard.schemas.user import AuthorPublic


class CommentCreate(BaseModel):
    body: str = Field(..., min_length=10, max_length=250)


class CommentUpdate(BaseModel):
    body: str | None = Field(None, min_length=10, max_length=250)


class CommentResponse(BaseModel):
    id: UUID
    body: str
    author_id: UUID
    post_id: UUID
    created_at: datetime
    author: AuthorPublic | None = None

    model_config = {"from_attributes": True}
