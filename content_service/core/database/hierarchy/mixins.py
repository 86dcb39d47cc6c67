"""Mixin for models stored as a nested-set (interval) forest.

Provides the structural columns and read-only tree navigation for models
whose hierarchy is maintained by NestedSetRepository. Navigation methods
are single SELECTs on the interval columns, so each one observes one
consistent snapshot of the forest.

Structural changes (insert, move, delete) must go through
NestedSetRepository; assigning the columns directly bypasses the forest
lock and breaks the invariants.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import CheckConstraint, ForeignKey, Integer, select
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

if TYPE_CHECKING:
    from typing import Self

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.types import TypeEngine

    from content_service.core.database.hierarchy.nested_set import NodeBounds


def nested_set_constraints() -> tuple[CheckConstraint, ...]:
    """Fresh CHECK constraints for a nested-set table.

    Call once per model inside ``__table_args__``; constraint objects
    cannot be shared between tables.
    """
    return (
        CheckConstraint("lft < rgt", name="interval_bounds"),
        CheckConstraint("depth >= 0", name="depth_non_negative"),
    )


class NestedSetMixin:
    """Mixin adding nested-set columns and navigation to a model.

    The model must have an ``id`` primary key. ``parent_id`` references the
    same table with ``ON DELETE CASCADE``; its column type follows
    ``__parent_id_type__`` (Integer by default, Uuid for UUID keys).

    Example:
        >>> class Category(TimestampedBase, NestedSetMixin):
        ...     __tablename__ = "categories"
        ...     __table_args__ = nested_set_constraints()
        ...     name: Mapped[str] = mapped_column(String(100))
        >>>
        >>> cat = await session.get(Category, 1)
        >>> ancestors = await cat.get_ancestors(session)
        >>> descendants = await cat.get_descendants(session, max_depth=1)
        >>> roots = await Category.get_roots(session)
    """

    __allow_unmapped__ = True

    # Override for non-integer primary keys
    __parent_id_type__: ClassVar[type[TypeEngine[Any]] | TypeEngine[Any]] = Integer

    @declared_attr
    def parent_id(cls) -> Mapped[Any]:
        return mapped_column(
            cls.__parent_id_type__,
            ForeignKey(f"{cls.__tablename__}.id", ondelete="CASCADE"),  # type: ignore[attr-defined]
            nullable=True,
            index=True,
            comment="Parent node id (NULL for roots)",
        )

    left: Mapped[int] = mapped_column(
        "lft",
        Integer,
        nullable=False,
        index=True,
        comment="Left interval bound",
    )
    right: Mapped[int] = mapped_column(
        "rgt",
        Integer,
        nullable=False,
        index=True,
        comment="Right interval bound",
    )
    depth: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of ancestors (roots are 0)",
    )
    ordering: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position among siblings",
    )

    @property
    def is_leaf(self) -> bool:
        """Whether this node has no descendants."""
        return self.right - self.left == 1

    @property
    def descendant_count(self) -> int:
        """Number of descendants implied by the interval width."""
        return (self.right - self.left - 1) // 2

    def to_bounds(self) -> NodeBounds:
        """Snapshot of the structural columns."""
        from content_service.core.database.hierarchy.nested_set import NodeBounds

        return NodeBounds(
            id=self.id,  # type: ignore[attr-defined]
            parent_id=self.parent_id,
            left=self.left,
            right=self.right,
            depth=self.depth,
            ordering=self.ordering,
        )

    def apply_bounds(self, bounds: NodeBounds) -> None:
        """Copy structural columns from a computed snapshot."""
        self.parent_id = bounds.parent_id
        self.left = bounds.left
        self.right = bounds.right
        self.depth = bounds.depth
        self.ordering = bounds.ordering

    async def get_children(self, session: AsyncSession) -> list[Self]:
        """Get direct children ordered by sibling position."""
        cls = type(self)
        stmt = (
            select(cls)
            .where(cls.parent_id == self.id)  # type: ignore[attr-defined]
            .order_by(cls.ordering, cls.id)  # type: ignore[attr-defined]
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_siblings(self, session: AsyncSession, *, include_self: bool = False) -> list[Self]:
        """Get nodes sharing this node's parent.

        Args:
            session: Async database session
            include_self: Include this node in its sibling position

        Returns:
            Siblings ordered by (ordering, id)
        """
        cls = type(self)
        if self.parent_id is None:
            stmt = select(cls).where(cls.parent_id.is_(None))
        else:
            stmt = select(cls).where(cls.parent_id == self.parent_id)
        if not include_self:
            stmt = stmt.where(cls.id != self.id)  # type: ignore[attr-defined]
        stmt = stmt.order_by(cls.ordering, cls.id)  # type: ignore[attr-defined]
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_ancestors(self, session: AsyncSession, *, include_self: bool = False) -> list[Self]:
        """Get ancestors ordered from the root down.

        Args:
            session: Async database session
            include_self: Append this node after its ancestors
        """
        cls = type(self)
        if include_self:
            stmt = select(cls).where(cls.left <= self.left, cls.right >= self.right)
        else:
            stmt = select(cls).where(cls.left < self.left, cls.right > self.right)
        result = await session.execute(stmt.order_by(cls.left))
        return list(result.scalars().all())

    async def get_descendants(
        self,
        session: AsyncSession,
        *,
        include_self: bool = False,
        max_depth: int | None = None,
    ) -> list[Self]:
        """Get all descendant nodes in pre-order.

        Args:
            session: Async database session
            include_self: Include this node at start of list (default: False)
            max_depth: Maximum depth of descendants relative to this node
                      (None for unlimited)
        """
        if self.is_leaf and not include_self:
            return []
        cls = type(self)
        if include_self:
            stmt = select(cls).where(cls.left >= self.left, cls.right <= self.right)
        else:
            stmt = select(cls).where(cls.left > self.left, cls.right < self.right)
        if max_depth is not None:
            stmt = stmt.where(cls.depth <= self.depth + max_depth)
        result = await session.execute(stmt.order_by(cls.left))
        return list(result.scalars().all())

    @classmethod
    async def get_roots(cls, session: AsyncSession) -> list[Self]:
        """Get every root node ordered by sibling position."""
        stmt = select(cls).where(cls.parent_id.is_(None)).order_by(cls.ordering, cls.id)  # type: ignore[attr-defined]
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    async def get_tree(cls, session: AsyncSession) -> list[Self]:
        """Get the whole forest in pre-order."""
        result = await session.execute(select(cls).order_by(cls.left))
        return list(result.scalars().all())


__all__ = [
    "NestedSetMixin",
    "nested_set_constraints",
]
