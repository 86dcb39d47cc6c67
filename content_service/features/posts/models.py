"""SQLAlchemy models for the posts feature."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import TimestampedBase
from content_service.core.workflow import PostStatus


class Post(TimestampedBase):
    """Article owning comments, tags, media and content blocks."""

    __tablename__ = "posts"
    __table_args__ = (UniqueConstraint("slug", name="uq_posts_slug"),)

    title: Mapped[str] = mapped_column(String(200), nullable=False, comment="Post title")
    slug: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
        comment="URL-safe unique identifier",
    )
    excerpt: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Short summary shown in listings",
    )
    body: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Post body")
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PostStatus.DRAFT.value,
        index=True,
        comment="draft | published | archived",
    )
    author_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="Author user id (users live outside this service)",
    )
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Primary category",
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set on first publish, kept across unpublish",
    )

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED

    def __repr__(self) -> str:
        """Return post summary for debugging."""
        return f"<Post(id={self.id}, slug={self.slug!r}, status={self.status})>"
