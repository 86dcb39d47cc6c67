"""SQLAlchemy models for the categories feature."""

from __future__ import annotations

from sqlalchemy import Boolean, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import NestedSetMixin, TimestampedBase, nested_set_constraints


class Category(TimestampedBase, NestedSetMixin):
    """Category in the content taxonomy.

    Categories form one nested-set forest: top-level sections are roots
    and sub-sections nest inside them, e.g.

        News
        ├── World
        └── Technology
            └── AI
    """

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("name", name="uq_categories_name"),
        UniqueConstraint("slug", name="uq_categories_slug"),
        *nested_set_constraints(),
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Unique category name",
    )
    slug: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="URL-safe unique identifier",
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Optional description shown on the category page",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
        comment="Inactive categories are hidden from listings",
    )

    def __repr__(self) -> str:
        """Return category summary for debugging."""
        return f"<Category(id={self.id}, slug={self.slug!r}, lft={self.left}, rgt={self.right})>"
