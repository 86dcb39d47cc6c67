"""Repository for the categories feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select

from content_service.core.database import NestedSetRepository
from content_service.core.settings import get_hierarchy_settings
from content_service.features.categories.models import Category

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class CategoryRepository(NestedSetRepository[Category]):
    """Repository for Category model.

    Inherits from NestedSetRepository:
        - insert_node, move_node, delete_node, rebuild
        - get_tree, get_roots, get_children, get_ancestors,
          get_descendants, get_siblings, check_integrity

    Feature-specific methods below.
    """

    def __init__(self, *, lock_timeout_ms: int | None = None) -> None:
        """Initialize with Category model."""
        super().__init__(Category, lock_timeout_ms=lock_timeout_ms)

    async def get_by_name(self, session: AsyncSession, name: str) -> Category | None:
        return await self.get_by(session, Category.name, name)

    async def get_by_slug(self, session: AsyncSession, slug: str) -> Category | None:
        return await self.get_by(session, Category.slug, slug)

    async def list_active(self, session: AsyncSession) -> Sequence[Category]:
        """Active categories in tree (pre-)order."""
        stmt = select(Category).where(Category.is_active.is_(True)).order_by(Category.left)
        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_active() -> {len(items)} items")
        return items

    async def search(
        self,
        session: AsyncSession,
        query: str,
        *,
        active_only: bool = False,
    ) -> Sequence[Category]:
        """Categories whose name, slug or description contains ``query``.

        Args:
            session: Database session
            query: Case-insensitive substring to look for
            active_only: Skip deactivated categories

        Returns:
            Matching categories in tree (pre-)order
        """
        pattern = f"%{query}%"
        stmt = select(Category).where(
            or_(
                Category.name.ilike(pattern),
                Category.slug.ilike(pattern),
                Category.description.ilike(pattern),
            )
        )
        if active_only:
            stmt = stmt.where(Category.is_active.is_(True))
        stmt = stmt.order_by(Category.left)

        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(lambda: f"db.search(query={query!r}) -> {len(items)} items")
        return items

    async def count(self, session: AsyncSession, *, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(Category)
        if active_only:
            stmt = stmt.where(Category.is_active.is_(True))
        return (await session.execute(stmt)).scalar_one()

    async def count_children(self, session: AsyncSession, category_id: int) -> int:
        stmt = select(func.count()).select_from(Category).where(Category.parent_id == category_id)
        return (await session.execute(stmt)).scalar_one()

# Factory function for dependency injection
_category_repository: CategoryRepository | None = None


def get_category_repository() -> CategoryRepository:
    """Get CategoryRepository instance.

    The forest lock timeout comes from ``TREE_LOCK_TIMEOUT_MS``.
    """
    global _category_repository
    if _category_repository is None:
        _category_repository = CategoryRepository(
            lock_timeout_ms=get_hierarchy_settings().lock_timeout_ms,
        )
    return _category_repository
