"""SQLAlchemy models for the contents feature."""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import AttachableKind, OwnedMixin, TimestampedBase, owner_constraints


class ContentType(StrEnum):
    """Format of a content block body."""

    TEXT = "text"
    HTML = "html"
    MARKDOWN = "markdown"
    JSON = "json"
    XML = "xml"


class ContentBlock(TimestampedBase, OwnedMixin):
    """Free-form content attached to an owner.

    Unlike tags and media the body lives on the row itself, so there is no
    separate resource table; blocks are ordered per owner and group.
    """

    __tablename__ = "contents"
    __table_args__ = owner_constraints("contents")
    __attachable_kind__ = AttachableKind.CONTENT

    body: Mapped[str] = mapped_column(Text, nullable=False, comment="Block body")
    content_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ContentType.TEXT.value,
        comment="text | html | markdown | json | xml",
    )

    def __repr__(self) -> str:
        return (
            f"<ContentBlock(id={self.id}, owner={self.owner_type}:{self.owner_id}, "
            f"type={self.content_type})>"
        )
