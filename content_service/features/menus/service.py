"""Service layer for the menus feature."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from content_service.core.database import CircularReferenceError
from content_service.core.exceptions import ConflictException
from content_service.features.menus.models import Menu
from content_service.features.menus.repository import MenuRepository, get_menu_repository
from content_service.features.menus.schemas import build_menu_tree
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.menus.schemas import MenuCreate, MenuTreeResponse, MenuUpdate


logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class MenuService:
    """Service for navigation menus."""

    def __init__(
        self,
        session: AsyncSession,
        repo: MenuRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_menu_repository()

    async def get_menu(self, menu_id: UUID) -> Menu:
        """Get a menu entry by ID.

        Raises:
            NotFoundError: If the entry does not exist
        """
        return await self._repo.get_or_raise(self._session, menu_id)

    async def create_menu(self, payload: MenuCreate) -> Menu:
        """Create a menu entry as the last child of ``payload.parent_id``.

        Raises:
            CircularReferenceError: If a client-supplied id is also the parent
            ConflictException: If the client-supplied id is taken
            InvalidParentError: If the parent does not exist
        """
        if payload.id is not None:
            if payload.parent_id == payload.id:
                raise CircularReferenceError("Menu", payload.id, payload.parent_id)
            if await self._repo.get(self._session, payload.id) is not None:
                raise ConflictException(
                    detail=f"Menu with id '{payload.id}' already exists",
                    type="menu-id-exists",
                    extra={"menu_id": str(payload.id)},
                )

        menu = Menu(
            name=payload.name,
            description=payload.description,
            icon=payload.icon,
            url=payload.url,
            is_active=payload.is_active,
        )
        if payload.id is not None:
            menu.id = payload.id
        created = await self._repo.insert_node(self._session, menu, payload.parent_id)

        logger.info(
            "Menu created",
            extra={"menu_id": str(created.id), "parent_id": str(created.parent_id) if created.parent_id else None},
        )
        return created

    async def update_menu(self, menu_id: UUID, payload: MenuUpdate) -> Menu:
        """Update fields and, when ``parent_id`` is sent, move the entry.

        Raises:
            NotFoundError: If the entry does not exist
            CircularReferenceError: If the new parent is the entry or below it
            InvalidParentError: If the new parent does not exist
        """
        fields = payload.model_fields_set
        if "parent_id" in fields and payload.parent_id == menu_id:
            raise CircularReferenceError("Menu", menu_id, payload.parent_id)

        menu = await self.get_menu(menu_id)
        if "parent_id" in fields and payload.parent_id != menu.parent_id:
            menu = await self._repo.move_node(self._session, menu_id, payload.parent_id)

        for field in ("name", "description", "icon", "url", "is_active"):
            value = getattr(payload, field)
            if field in fields and value is not None:
                setattr(menu, field, value)
        await self._session.flush()
        await self._session.refresh(menu)

        lazy_logger.debug(lambda: f"service.update_menu({menu_id}) -> updated {sorted(fields)}")
        return menu

    async def move_menu(self, menu_id: UUID, parent_id: UUID | None) -> Menu:
        return await self._repo.move_node(self._session, menu_id, parent_id)

    async def delete_menu(self, menu_id: UUID, *, cascade: bool = False) -> int:
        """Delete an entry, and its sub-entries when ``cascade`` is set.

        Raises:
            NotFoundError: If the entry does not exist
            HasChildrenError: If it has sub-entries and cascade is False
        """
        removed = await self._repo.delete_node(self._session, menu_id, cascade=cascade)
        logger.info(
            "Menu deleted",
            extra={"menu_id": str(menu_id), "removed": removed, "cascade": cascade},
        )
        return removed

    async def get_roots(self, *, active_only: bool = False) -> Sequence[Menu]:
        """Top-level entries ordered by position."""
        return await self._repo.get_root_menus(self._session, active_only=active_only)

    async def get_children(self, menu_id: UUID) -> Sequence[Menu]:
        return await self._repo.get_children(self._session, menu_id)

    async def get_menu_tree(self, *, active_only: bool = False) -> list[MenuTreeResponse]:
        """Whole navigation as nested entries, roots in position order.

        With ``active_only`` an inactive entry hides its sub-entries too.
        """
        if active_only:
            nodes = await self._repo.list_active_tree(self._session)
        else:
            nodes = await self._repo.get_tree(self._session)
        return build_menu_tree(nodes)
