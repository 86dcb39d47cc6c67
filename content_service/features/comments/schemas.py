"""Pydantic schemas for the comments feature."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_service.core.schemas import TreeNodeResponse
from content_service.core.workflow import CommentStatus

CONTENT_MAX_LENGTH = 10_000


class CommentCreate(BaseModel):
    """Payload used when posting a comment or a reply."""

    post_id: int = Field(..., description="Post being commented on")
    user_id: int = Field(..., description="Author user id")
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)
    parent_id: int | None = Field(default=None, description="Comment being replied to")

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: object) -> object:
        """Trim whitespace before the length checks, so blank text is rejected."""
        return v.strip() if isinstance(v, str) else v


class CommentUpdate(BaseModel):
    """Payload for editing a comment's text."""

    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class CommentResponse(TreeNodeResponse):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    parent_id: int | None = None
    post_id: int
    user_id: int
    content: str
    status: CommentStatus
    reply_count: int
    word_count: int


__all__ = [
    "CONTENT_MAX_LENGTH",
    "CommentCreate",
    "CommentResponse",
    "CommentUpdate",
]
