"""Pydantic schemas for the categories feature."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_service.core.schemas import TreeNodeResponse

SLUG_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"

_SEPARATORS = re.compile(r"[\s_]+")
_INVALID = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def slugify(value: str) -> str:
    """Build a URL slug from a display name.

    Lower-cases, turns whitespace and underscores into hyphens and drops
    every other punctuation character.

    Example:
        >>> slugify("Machine Learning & AI")
        'machine-learning-ai'
    """
    slug = _SEPARATORS.sub("-", value.strip().lower())
    slug = _INVALID.sub("", slug)
    return _REPEATED_HYPHENS.sub("-", slug).strip("-")


class CategoryBase(BaseModel):
    """Shared attributes for category payloads."""

    name: str = Field(..., min_length=2, max_length=100, description="Unique category name")
    description: str | None = Field(default=None, max_length=2000)
    is_active: bool = Field(default=True, description="Whether the category is listed")

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Strip surrounding whitespace."""
        return v.strip()


class CategoryCreate(CategoryBase):
    """Payload used when creating a category.

    The slug is derived from the name when omitted.
    """

    slug: str | None = Field(default=None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    parent_id: int | None = Field(default=None, description="Parent category, None for a root")


class CategoryUpdate(BaseModel):
    """Payload for updating a category.

    Setting ``parent_id`` (including to None) moves the category; leaving it
    out keeps the current position.
    """

    name: str | None = Field(default=None, min_length=2, max_length=100)
    slug: str | None = Field(default=None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=2000)
    is_active: bool | None = None
    parent_id: int | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is not None:
            return v.strip()
        return v


class CategoryMove(BaseModel):
    """Payload for moving a category under another parent."""

    parent_id: int | None = Field(default=None, description="New parent, None for root level")


class CategoryResponse(TreeNodeResponse):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    parent_id: int | None = None
    name: str
    slug: str
    description: str | None = None
    is_active: bool


class CategoryBreadcrumb(BaseModel):
    """Path from the root to a category."""

    items: list[CategoryResponse]
    path: str = Field(description='Names joined by the separator, e.g. "News > Tech > AI"')


class CategoryStats(BaseModel):
    """Counts describing one category's place in the forest."""

    category_id: int
    post_count: int = Field(description="Posts filed directly under the category")
    child_count: int
    descendant_count: int
    depth: int
    is_root: bool
    is_active: bool


__all__ = [
    "SLUG_PATTERN",
    "CategoryBase",
    "CategoryBreadcrumb",
    "CategoryCreate",
    "CategoryMove",
    "CategoryResponse",
    "CategoryStats",
    "CategoryUpdate",
    "slugify",
]
