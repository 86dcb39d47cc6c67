"""Repository for the menus feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from content_service.core.database import NestedSetRepository
from content_service.core.settings import get_hierarchy_settings
from content_service.features.menus.models import Menu

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class MenuRepository(NestedSetRepository[Menu]):
    """Repository for Menu model."""

    def __init__(self, *, lock_timeout_ms: int | None = None) -> None:
        """Initialize with Menu model."""
        super().__init__(Menu, lock_timeout_ms=lock_timeout_ms)

    async def list_active_tree(self, session: AsyncSession) -> Sequence[Menu]:
        """Active entries whose ancestors are all active, in pre-order.

        An inactive entry hides its whole subtree.
        """
        nodes = await self.get_tree(session)
        hidden: list[Menu] = []
        visible: list[Menu] = []
        for node in nodes:
            if any(h.left < node.left and node.right < h.right for h in hidden):
                continue
            if node.is_active:
                visible.append(node)
            else:
                hidden.append(node)

        self._lazy.debug(lambda: f"db.list_active_tree() -> {len(visible)}/{len(nodes)} visible")
        return visible

    async def get_root_menus(self, session: AsyncSession, *, active_only: bool = False) -> Sequence[Menu]:
        stmt = select(Menu).where(Menu.parent_id.is_(None))
        if active_only:
            stmt = stmt.where(Menu.is_active.is_(True))
        stmt = stmt.order_by(Menu.ordering, Menu.id)
        result = await session.execute(stmt)
        return result.scalars().all()


# Factory function for dependency injection
_menu_repository: MenuRepository | None = None


def get_menu_repository() -> MenuRepository:
    """Get MenuRepository instance."""
    global _menu_repository
    if _menu_repository is None:
        _menu_repository = MenuRepository(
            lock_timeout_ms=get_hierarchy_settings().lock_timeout_ms,
        )
    return _menu_repository
