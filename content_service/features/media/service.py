"""Service layer for the media feature."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from content_service.core.database.association import normalize_group
from content_service.core.exceptions import ConflictException
from content_service.features.media.models import Media
from content_service.features.media.repository import (
    MediableRepository,
    MediaRepository,
    get_media_repository,
    get_mediable_repository,
)
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.media.models import Mediable
    from content_service.features.media.schemas import MediaCreate


logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class MediaService:
    """Service for media metadata and media attachments.

    Media can be attached to posts, users, categories and comments, in
    named groups with an explicit order inside each group.
    """

    def __init__(
        self,
        session: AsyncSession,
        repo: MediaRepository | None = None,
        links: MediableRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_media_repository()
        self._links = links or get_mediable_repository()

    async def register_media(self, payload: MediaCreate) -> Media:
        """Record metadata for an uploaded file."""
        media = Media(
            name=payload.name,
            file_name=payload.file_name,
            mime_type=payload.mime_type,
            size=payload.size,
            disk=payload.disk.value,
            path=payload.path,
        )
        created = await self._repo.create(self._session, media)

        logger.info(
            "Media registered",
            extra={"media_id": created.id, "mime_type": created.mime_type, "disk": created.disk},
        )
        return created

    async def get_media(self, media_id: int) -> Media:
        """Get media metadata by ID.

        Raises:
            NotFoundError: If media not found
        """
        return await self._repo.get_or_raise(self._session, media_id)

    async def delete_media(self, media_id: int, *, force: bool = False) -> int:
        """Delete media metadata.

        Args:
            media_id: Media to delete
            force: Detach it from every owner instead of refusing

        Returns:
            Number of owner links removed

        Raises:
            NotFoundError: If media not found
            ConflictException: If the media is attached and force is False
        """
        media = await self.get_media(media_id)
        usage = await self._links.count_by_attachable(self._session, media_id)
        if usage and not force:
            raise ConflictException(
                detail=f"Media '{media.name}' is attached to {usage} owner(s)",
                type="media-in-use",
                extra={"media_id": media_id, "usage_count": usage},
            )

        removed = await self._links.remove_attachable(self._session, media_id) if usage else 0
        await self._repo.delete(self._session, media)

        logger.info("Media deleted", extra={"media_id": media_id, "links_removed": removed})
        return removed

    async def attach(
        self,
        owner_type: Any,
        owner_id: Any,
        media_id: int,
        *,
        group: str | None = None,
        sort_order: int | None = None,
    ) -> Mediable:
        """Attach media to an owner.

        Attaching the same media to the same owner and group again keeps
        one link; a given ``sort_order`` repositions it.

        Raises:
            InvalidOwnerTypeError: If the owner kind cannot hold media
            NotFoundError: If media not found
        """
        self._links.validate_owner(owner_type)
        await self.get_media(media_id)
        return await self._links.attach(
            self._session, owner_type, owner_id, media_id, group=group, sort_order=sort_order
        )

    async def detach(
        self,
        owner_type: Any,
        owner_id: Any,
        media_id: int,
        *,
        group: str | None = None,
    ) -> bool:
        """Detach media from an owner (from every group when ``group`` is None)."""
        return await self._links.detach(self._session, owner_type, owner_id, media_id, group=group)

    async def media_for(
        self,
        owner_type: Any,
        owner_id: Any,
        *,
        group: str | None = None,
    ) -> Sequence[Media]:
        """Media of an owner in display order, one entry per link.

        Raises:
            InvalidOwnerTypeError: If the owner kind cannot hold media
        """
        owner = self._links.validate_owner(owner_type)
        rows = await self._repo.list_for_owner(
            self._session,
            owner,
            str(owner_id),
            group=normalize_group(group) if group is not None else None,
        )
        return [media for media, _ in rows]

    async def links_for(
        self,
        owner_type: Any,
        owner_id: Any,
        *,
        group: str | None = None,
    ) -> Sequence[Mediable]:
        return await self._links.list_by_owner(self._session, owner_type, owner_id, group=group)

    async def reorder(
        self,
        owner_type: Any,
        owner_id: Any,
        media_ids: Sequence[int],
        *,
        group: str | None = None,
    ) -> int:
        """Set the order of an owner's media inside a group.

        Returns:
            Number of links repositioned
        """
        updated = await self._links.reorder(
            self._session, owner_type, owner_id, media_ids, group=normalize_group(group)
        )
        lazy_logger.debug(lambda: f"service.reorder({owner_type}:{owner_id}) -> {updated} links")
        return updated

    async def usages(self, media_id: int) -> Sequence[Mediable]:
        """Every owner link of a media file, oldest first.

        Raises:
            NotFoundError: If media not found
        """
        await self.get_media(media_id)
        return await self._links.list_by_attachable(self._session, media_id)
