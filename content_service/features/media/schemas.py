"""Pydantic schemas for the media feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_service.core.database import DEFAULT_GROUP, OwnerType
from content_service.features.media.models import StorageDisk


class MediaCreate(BaseModel):
    """Metadata registered after an upload completes."""

    name: str = Field(..., min_length=1, max_length=255)
    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., min_length=3, max_length=100, pattern=r"^[\w.+-]+/[\w.+-]+$")
    size: int = Field(..., gt=0, description="File size in bytes")
    disk: StorageDisk = StorageDisk.LOCAL
    path: str | None = Field(default=None, max_length=500)


class MediaResponse(MediaCreate):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class AttachMediaRequest(BaseModel):
    """Payload for attaching a media file to an owner."""

    owner_type: OwnerType
    owner_id: str = Field(..., min_length=1, max_length=64)
    media_id: int
    group: str = Field(default=DEFAULT_GROUP, max_length=50)
    sort_order: int | None = Field(default=None, ge=0)


class ReorderMediaRequest(BaseModel):
    """New order of an owner's media inside one group."""

    media_ids: list[int] = Field(..., min_length=1)
    group: str = Field(default=DEFAULT_GROUP, max_length=50)


class MediableResponse(BaseModel):
    """One owner link of a media file."""

    model_config = ConfigDict(from_attributes=True)

    media_id: int
    owner_type: OwnerType
    owner_id: str
    group: str
    sort_order: int


__all__ = [
    "AttachMediaRequest",
    "MediaCreate",
    "MediaResponse",
    "MediableResponse",
    "ReorderMediaRequest",
]
