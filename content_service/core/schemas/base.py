"""Base schema classes for API payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CustomBase(BaseModel):
    """Base model with common configuration for all schemas."""

    model_config = ConfigDict(
        # Allow creation from ORM models (SQLAlchemy)
        from_attributes=True,
        # Use enum values instead of names
        use_enum_values=True,
        populate_by_name=True,
        # Silently drop unexpected data
        extra="ignore",
        str_strip_whitespace=True,
    )


class TimestampedResponse(CustomBase):
    """Response mixin with the row timestamps."""

    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")


class TreeNodeResponse(TimestampedResponse):
    """Structural fields shared by category, comment and menu responses."""

    left: int = Field(description="Left interval bound")
    right: int = Field(description="Right interval bound")
    depth: int = Field(description="Distance from the root (roots are 0)")
    ordering: int = Field(description="Position among siblings")
