"""Repositories for the media feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from content_service.core.database import BaseRepository, PolymorphicAssociationRepository
from content_service.features.media.models import Media, Mediable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.database import OwnerType


class MediaRepository(BaseRepository[Media]):
    """Repository for Media model."""

    def __init__(self) -> None:
        """Initialize with Media model."""
        super().__init__(Media)

    async def list_for_owner(
        self,
        session: AsyncSession,
        owner_type: OwnerType,
        owner_id: str,
        *,
        group: str | None = None,
    ) -> Sequence[tuple[Media, Mediable]]:
        """Media of one owner with their links, in display order."""
        stmt = (
            select(Media, Mediable)
            .join(Mediable, Mediable.media_id == Media.id)
            .where(
                Mediable.owner_type == owner_type.value,
                Mediable.owner_id == owner_id,
            )
        )
        if group is not None:
            stmt = stmt.where(Mediable.group == group)
        stmt = stmt.order_by(Mediable.group, Mediable.sort_order, Mediable.id)

        result = await session.execute(stmt)
        rows = [(row.Media, row.Mediable) for row in result]

        self._lazy.debug(
            lambda: f"db.list_for_owner({owner_type.value}:{owner_id}, group={group!r}) -> {len(rows)} items"
        )
        return rows


class MediableRepository(PolymorphicAssociationRepository[Mediable]):
    """Media links, partitioned under AttachableKind.MEDIA."""

    def __init__(self) -> None:
        super().__init__(Mediable)


# Factory functions for dependency injection
_media_repository: MediaRepository | None = None
_mediable_repository: MediableRepository | None = None


def get_media_repository() -> MediaRepository:
    """Get MediaRepository instance."""
    global _media_repository
    if _media_repository is None:
        _media_repository = MediaRepository()
    return _media_repository


def get_mediable_repository() -> MediableRepository:
    """Get MediableRepository instance."""
    global _mediable_repository
    if _mediable_repository is None:
        _mediable_repository = MediableRepository()
    return _mediable_repository
