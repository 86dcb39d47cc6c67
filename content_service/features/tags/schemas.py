"""Pydantic schemas for the tags feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_service.core.database import DEFAULT_GROUP, OwnerType
from content_service.features.tags.models import TagType

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class TagBase(BaseModel):
    """Shared attributes for tag payloads."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Unique tag name (e.g., 'python', 'release-notes')",
    )
    description: str | None = Field(default=None, max_length=200)
    type: TagType = Field(default=TagType.GENERAL)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Normalize tag name to lowercase with no leading/trailing whitespace."""
        return v.strip().lower()


class TagCreate(TagBase):
    """Payload used when creating a tag.

    ``color`` defaults to the colour of the tag type.
    """

    color: str | None = Field(default=None, pattern=COLOR_PATTERN)


class TagUpdate(BaseModel):
    """Payload for updating a tag."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)
    description: str | None = Field(default=None, max_length=200)
    type: TagType | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        """Normalize tag name if provided."""
        if v is not None:
            return v.strip().lower()
        return v


class TagResponse(TagBase):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    color: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TagWithCountResponse(TagResponse):
    """Tag response including how many owners use it."""

    usage_count: int = Field(default=0, description="Number of owners tagged with this tag")


class TaggingRequest(BaseModel):
    """Payload for tagging an owner."""

    owner_type: OwnerType
    owner_id: str = Field(..., min_length=1, max_length=64)
    tag_ids: list[int] = Field(..., min_length=1)
    group: str = Field(default=DEFAULT_GROUP, max_length=50)


class TagOwnerResponse(BaseModel):
    """One owner a tag is attached to."""

    model_config = ConfigDict(from_attributes=True)

    owner_type: OwnerType
    owner_id: str
    group: str
    created_at: datetime


__all__ = [
    "COLOR_PATTERN",
    "TagBase",
    "TagCreate",
    "TagOwnerResponse",
    "TagResponse",
    "TagUpdate",
    "TagWithCountResponse",
    "TaggingRequest",
]
