"""Pydantic schemas for the posts feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_service.core.workflow import PostStatus
from content_service.features.categories.schemas import SLUG_PATTERN


class PostBase(BaseModel):
    """Shared attributes for post payloads."""

    title: str = Field(..., min_length=1, max_length=200)
    excerpt: str | None = Field(default=None, max_length=500)
    body: str = Field(default="")
    author_id: int | None = None
    category_id: int | None = None

    @field_validator("title")
    @classmethod
    def normalize_title(cls, v: str) -> str:
        return v.strip()


class PostCreate(PostBase):
    """Payload used when creating a post (always starts as a draft).

    The slug is derived from the title when omitted.
    """

    slug: str | None = Field(default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN)


class PostUpdate(BaseModel):
    """Payload for updating a post's content. Status changes use the workflow methods."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    excerpt: str | None = Field(default=None, max_length=500)
    body: str | None = None
    category_id: int | None = None


class PostResponse(PostBase):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    status: PostStatus
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


__all__ = [
    "PostBase",
    "PostCreate",
    "PostResponse",
    "PostUpdate",
]
