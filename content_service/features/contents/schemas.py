"""Pydantic schemas for the contents feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_service.core.database import DEFAULT_GROUP, OwnerType
from content_service.features.contents.models import ContentType


class ContentCreate(BaseModel):
    """Payload for adding a content block to an owner.

    Without ``sort_order`` the block is appended to its group.
    """

    body: str = Field(..., min_length=1)
    content_type: ContentType = ContentType.TEXT
    group: str = Field(default=DEFAULT_GROUP, max_length=50)
    sort_order: int | None = Field(default=None, ge=0)


class ContentUpdate(BaseModel):
    """Payload for editing a content block."""

    body: str | None = Field(default=None, min_length=1)
    content_type: ContentType | None = None
    group: str | None = Field(default=None, max_length=50)
    sort_order: int | None = Field(default=None, ge=0)


class ContentResponse(BaseModel):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_type: OwnerType
    owner_id: str
    group: str
    sort_order: int
    body: str
    content_type: ContentType
    created_at: datetime
    updated_at: datetime


__all__ = [
    "ContentCreate",
    "ContentResponse",
    "ContentUpdate",
]
