"""SQLAlchemy models for the tags feature."""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import (
    AssociationMixin,
    AttachableKind,
    TimestampedBase,
    owner_constraints,
)


class TagType(StrEnum):
    """Purpose of a tag, used for grouping and default colours."""

    GENERAL = "general"
    CATEGORY = "category"
    FEATURE = "feature"
    SYSTEM = "system"


# Colour applied when a tag is created without one
DEFAULT_TAG_COLORS: dict[TagType, str] = {
    TagType.GENERAL: "#6B7280",
    TagType.CATEGORY: "#3B82F6",
    TagType.FEATURE: "#10B981",
    TagType.SYSTEM: "#EF4444",
}


class Tag(TimestampedBase):
    """Label attachable to posts, users, media, categories and comments."""

    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("name", name="uq_tags_name"),
        UniqueConstraint("slug", name="uq_tags_slug"),
    )

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Unique tag name (e.g., 'python', 'release-notes')",
    )
    slug: Mapped[str] = mapped_column(String(50), nullable=False, comment="URL-safe unique identifier")
    description: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
        comment="Optional description of the tag's purpose",
    )
    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default=DEFAULT_TAG_COLORS[TagType.GENERAL],
        comment="Hex color code (e.g., '#FF5733')",
    )
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TagType.GENERAL.value,
        index=True,
        comment="general | category | feature | system",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    def __repr__(self) -> str:
        """Return tag summary for debugging."""
        return f"<Tag(id={self.id}, name={self.name!r})>"


class TaggedEntity(TimestampedBase, AssociationMixin):
    """Link between a tag and any taggable owner.

    Rows for every owner kind share this table; ``(owner_type, owner_id)``
    names the owner and ``tag_id`` the tag. Deleting a tag removes its links.
    """

    __tablename__ = "taggables"
    __table_args__ = owner_constraints("taggables", "tag_id")
    __attachable_kind__ = AttachableKind.TAG
    __attachable_column__ = "tag_id"

    tag_id: Mapped[int] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Attached tag",
    )

    def __repr__(self) -> str:
        return f"<TaggedEntity(tag_id={self.tag_id}, owner={self.owner_type}:{self.owner_id})>"
