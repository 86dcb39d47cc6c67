"""Service layer for the contents feature."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from content_service.core.database.association import normalize_group
from content_service.features.contents.models import ContentBlock
from content_service.features.contents.repository import ContentRepository, get_content_repository
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.contents.schemas import ContentCreate, ContentUpdate


logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class ContentService:
    """Service for content blocks owned by posts, users, media, categories and comments."""

    def __init__(
        self,
        session: AsyncSession,
        repo: ContentRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_content_repository()

    async def add_content(self, owner_type: Any, owner_id: Any, payload: ContentCreate) -> ContentBlock:
        """Add a block to an owner.

        Raises:
            InvalidOwnerTypeError: If the owner kind cannot hold content
        """
        owner = self._repo.validate_owner(owner_type)
        group = normalize_group(payload.group)
        position = payload.sort_order
        if position is None:
            position = await self._repo.next_sort_order(self._session, owner, owner_id, group)

        block = ContentBlock(
            owner_type=owner.value,
            owner_id=str(owner_id),
            group=group,
            sort_order=position,
            body=payload.body,
            content_type=payload.content_type.value,
        )
        created = await self._repo.create(self._session, block)

        logger.info(
            "Content added",
            extra={
                "content_id": created.id,
                "owner_type": owner.value,
                "owner_id": str(owner_id),
                "group": group,
            },
        )
        return created

    async def get_content(self, content_id: int) -> ContentBlock:
        """Get a block by ID.

        Raises:
            NotFoundError: If the block does not exist
        """
        return await self._repo.get_or_raise(self._session, content_id)

    async def update_content(self, content_id: int, payload: ContentUpdate) -> ContentBlock:
        block = await self.get_content(content_id)
        if payload.body is not None:
            block.body = payload.body
        if payload.content_type is not None:
            block.content_type = payload.content_type.value
        if payload.group is not None:
            block.group = normalize_group(payload.group)
        if payload.sort_order is not None:
            block.sort_order = payload.sort_order

        await self._session.flush()
        await self._session.refresh(block)

        lazy_logger.debug(lambda: f"service.update_content({content_id}) -> updated")
        return block

    async def remove_content(self, content_id: int) -> None:
        """Delete a block.

        Raises:
            NotFoundError: If the block does not exist
        """
        block = await self.get_content(content_id)
        await self._repo.delete(self._session, block)
        logger.info("Content removed", extra={"content_id": content_id})

    async def list_contents(
        self,
        owner_type: Any,
        owner_id: Any,
        *,
        group: str | None = None,
    ) -> Sequence[ContentBlock]:
        """Blocks of an owner ordered by sort_order, then creation."""
        return await self._repo.list_by_owner(self._session, owner_type, owner_id, group=group)

    async def reorder(
        self,
        owner_type: Any,
        owner_id: Any,
        content_ids: Sequence[int],
        *,
        group: str | None = None,
    ) -> int:
        """Set block order inside a group to follow ``content_ids``."""
        return await self._repo.reorder(
            self._session, owner_type, owner_id, content_ids, group=normalize_group(group)
        )
