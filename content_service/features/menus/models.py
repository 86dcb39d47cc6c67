"""SQLAlchemy models for the menus feature."""

from __future__ import annotations

from sqlalchemy import Boolean, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import NestedSetMixin, UUIDTimestampedBase, nested_set_constraints


class Menu(UUIDTimestampedBase, NestedSetMixin):
    """Navigation menu entry.

    Menus use UUID keys that clients may choose themselves, so an entry can
    be referenced before it is created (e.g. in a seeded navigation file).
    """

    __tablename__ = "menus"
    __table_args__ = nested_set_constraints()
    __parent_id_type__ = Uuid

    name: Mapped[str] = mapped_column(String(50), nullable=False, comment="Menu label")
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    icon: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Icon identifier rendered next to the label",
    )
    url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Link target; None for pure grouping entries",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    def __repr__(self) -> str:
        """Return menu summary for debugging."""
        return f"<Menu(id={self.id}, name={self.name!r}, depth={self.depth})>"
