"""Repositories for the tags feature."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select

from content_service.core.database import BaseRepository, PolymorphicAssociationRepository
from content_service.features.tags.models import Tag, TaggedEntity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.database import OwnerType
    from content_service.features.tags.models import TagType


class TagRepository(BaseRepository[Tag]):
    """Repository for Tag model.

    Inherits from BaseRepository:
        - get(session, id) -> Tag | None
        - get_or_raise(session, id) -> Tag
        - get_by(session, attr, value) -> Tag | None
        - create(session, instance) -> Tag
        - delete(session, instance) -> None

    Feature-specific methods below.
    """

    def __init__(self) -> None:
        """Initialize with Tag model."""
        super().__init__(Tag)

    async def get_by_name(self, session: AsyncSession, name: str) -> Tag | None:
        return await self.get_by(session, Tag.name, name)

    async def get_by_slug(self, session: AsyncSession, slug: str) -> Tag | None:
        return await self.get_by(session, Tag.slug, slug)

    async def list_with_search(
        self,
        session: AsyncSession,
        *,
        search: str | None = None,
        tag_type: TagType | None = None,
        active_only: bool = False,
    ) -> Sequence[Tag]:
        """List tags with optional filters.

        Args:
            session: Database session
            search: Filter tags by name (case-insensitive contains)
            tag_type: Only tags of this type
            active_only: Skip deactivated tags

        Returns:
            Sequence of tags ordered by name
        """
        stmt = select(Tag)
        if search:
            stmt = stmt.where(Tag.name.ilike(f"%{search}%"))
        if tag_type is not None:
            stmt = stmt.where(Tag.type == tag_type.value)
        if active_only:
            stmt = stmt.where(Tag.is_active.is_(True))
        stmt = stmt.order_by(Tag.name.asc())

        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list_with_search(search={search!r}, type={tag_type}) -> {len(items)} items"
        )
        return items

    async def get_tags_by_ids(self, session: AsyncSession, tag_ids: Sequence[int]) -> Sequence[Tag]:
        """Get multiple tags by their IDs (missing ids are skipped)."""
        if not tag_ids:
            return []
        result = await session.execute(select(Tag).where(Tag.id.in_(tag_ids)))
        items = result.scalars().all()

        self._lazy.debug(lambda: f"db.get_tags_by_ids({len(tag_ids)} ids) -> {len(items)} found")
        return items

    async def list_for_owner(
        self,
        session: AsyncSession,
        owner_type: OwnerType,
        owner_id: str,
        *,
        group: str | None = None,
    ) -> Sequence[Tag]:
        """Tags of one owner in display order (sort_order, then link creation)."""
        stmt = (
            select(Tag)
            .join(TaggedEntity, TaggedEntity.tag_id == Tag.id)
            .where(
                TaggedEntity.owner_type == owner_type.value,
                TaggedEntity.owner_id == owner_id,
            )
        )
        if group is not None:
            stmt = stmt.where(TaggedEntity.group == group)
        stmt = stmt.order_by(TaggedEntity.sort_order, TaggedEntity.id)

        result = await session.execute(stmt)
        # A tag linked in several groups appears once
        items = list(dict.fromkeys(result.scalars().all()))

        self._lazy.debug(
            lambda: f"db.list_for_owner({owner_type.value}:{owner_id}, group={group!r}) -> {len(items)} tags"
        )
        return items

    async def get_usage_counts(self, session: AsyncSession) -> dict[int, int]:
        """Number of links per tag (tags without links are absent)."""
        stmt = select(
            TaggedEntity.tag_id,
            func.count(TaggedEntity.id).label("count"),
        ).group_by(TaggedEntity.tag_id)

        result = await session.execute(stmt)
        counts: dict[int, int] = {row.tag_id: cast("int", row.count) for row in result}

        self._lazy.debug(lambda: f"db.get_usage_counts() -> {len(counts)} tags with counts")
        return counts


class TaggableRepository(PolymorphicAssociationRepository[TaggedEntity]):
    """Tag links, partitioned under AttachableKind.TAG."""

    def __init__(self) -> None:
        super().__init__(TaggedEntity)


# Factory functions for dependency injection
_tag_repository: TagRepository | None = None
_taggable_repository: TaggableRepository | None = None


def get_tag_repository() -> TagRepository:
    """Get TagRepository instance."""
    global _tag_repository
    if _tag_repository is None:
        _tag_repository = TagRepository()
    return _tag_repository


def get_taggable_repository() -> TaggableRepository:
    """Get TaggableRepository instance."""
    global _taggable_repository
    if _taggable_repository is None:
        _taggable_repository = TaggableRepository()
    return _taggable_repository
