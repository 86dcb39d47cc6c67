"""Service layer for the tags feature."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from content_service.core.database import NotFoundError
from content_service.core.database.association import normalize_group
from content_service.core.exceptions import ConflictException, ValidationException
from content_service.features.categories.schemas import slugify
from content_service.features.tags.models import DEFAULT_TAG_COLORS, Tag, TagType
from content_service.features.tags.repository import (
    TaggableRepository,
    TagRepository,
    get_tag_repository,
    get_taggable_repository,
)
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.tags.models import TaggedEntity
    from content_service.features.tags.schemas import TagCreate, TagUpdate


# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)


class TagService:
    """Service for tags and tagging.

    Handles business logic for:
    - Tag CRUD operations with name uniqueness
    - Tagging and untagging owners of any allowed kind
    - Refusing to delete tags that are still in use
    """

    def __init__(
        self,
        session: AsyncSession,
        repo: TagRepository | None = None,
        links: TaggableRepository | None = None,
    ) -> None:
        """Initialize the tag service.

        Args:
            session: Database session for operations
            repo: Tag repository (optional, uses default if not provided)
            links: Tag link repository (optional, uses default if not provided)
        """
        self._session = session
        self._repo = repo or get_tag_repository()
        self._links = links or get_taggable_repository()

    # ------------------------------------------------------------------
    # Tag CRUD
    # ------------------------------------------------------------------

    async def list_tags(
        self,
        *,
        search: str | None = None,
        tag_type: TagType | None = None,
        include_counts: bool = False,
    ) -> tuple[Sequence[Tag], dict[int, int]]:
        """List tags with optional search and usage counts.

        Returns:
            Tuple of (tags, counts_dict). If include_counts is False,
            counts_dict will be empty.
        """
        tags = await self._repo.list_with_search(self._session, search=search, tag_type=tag_type)

        counts: dict[int, int] = {}
        if include_counts:
            counts = await self._repo.get_usage_counts(self._session)

        lazy_logger.debug(
            lambda: f"service.list_tags(search={search!r}, include_counts={include_counts}) -> {len(tags)} tags",
        )
        return tags, counts

    async def get_tag(self, tag_id: int) -> Tag:
        """Get a tag by ID.

        Raises:
            NotFoundError: If tag not found
        """
        return await self._repo.get_or_raise(self._session, tag_id)

    async def create_tag(self, payload: TagCreate) -> Tag:
        """Create a new tag.

        Raises:
            ConflictException: If tag name or slug already exists
            ValidationException: If the name has no slug-able characters
        """
        slug = slugify(payload.name)
        if not slug:
            raise ValidationException(
                detail=f"Tag name {payload.name!r} must contain letters or digits",
                type="tag-name-invalid",
                extra={"name": payload.name},
            )
        await self._ensure_unique(payload.name, slug)

        tag = Tag(
            name=payload.name,
            slug=slug,
            description=payload.description,
            type=payload.type.value,
            color=payload.color or DEFAULT_TAG_COLORS[payload.type],
        )
        created = await self._repo.create(self._session, tag)

        logger.info(
            "Tag created",
            extra={"tag_id": created.id, "tag_name": created.name, "tag_type": created.type},
        )
        return created

    async def update_tag(self, tag_id: int, payload: TagUpdate) -> Tag:
        """Update an existing tag.

        Raises:
            NotFoundError: If tag not found
            ConflictException: If new name conflicts with existing tag
        """
        tag = await self.get_tag(tag_id)

        if payload.name is not None and payload.name != tag.name:
            slug = slugify(payload.name)
            await self._ensure_unique(payload.name, slug if slug != tag.slug else None)
            tag.name = payload.name
            tag.slug = slug
        if payload.color is not None:
            tag.color = payload.color
        if payload.description is not None:
            tag.description = payload.description
        if payload.type is not None:
            tag.type = TagType(payload.type).value
        if payload.is_active is not None:
            tag.is_active = payload.is_active

        await self._session.flush()
        await self._session.refresh(tag)

        lazy_logger.debug(lambda: f"service.update_tag({tag_id}) -> updated")
        return tag

    async def delete_tag(self, tag_id: int, *, force: bool = False) -> int:
        """Delete a tag.

        Args:
            tag_id: Tag to delete
            force: Also remove the tag from every owner instead of refusing

        Returns:
            Number of owner links removed with the tag

        Raises:
            NotFoundError: If tag not found
            ConflictException: If the tag is in use and force is False
        """
        tag = await self.get_tag(tag_id)
        usage = await self._links.count_by_attachable(self._session, tag_id)
        if usage and not force:
            raise ConflictException(
                detail=f"Tag '{tag.name}' is attached to {usage} owner(s)",
                type="tag-in-use",
                extra={"tag_id": tag_id, "usage_count": usage},
            )

        removed = await self._links.remove_attachable(self._session, tag_id) if usage else 0
        await self._repo.delete(self._session, tag)

        logger.info("Tag deleted", extra={"tag_id": tag_id, "links_removed": removed})
        return removed

    # ------------------------------------------------------------------
    # Tagging
    # ------------------------------------------------------------------

    async def tag(
        self,
        owner_type: Any,
        owner_id: Any,
        tag_id: int,
        *,
        group: str | None = None,
    ) -> TaggedEntity:
        """Attach a tag to an owner; tagging twice keeps one link.

        Raises:
            InvalidOwnerTypeError: If the owner kind cannot be tagged
            NotFoundError: If tag not found
        """
        self._links.validate_owner(owner_type)
        await self.get_tag(tag_id)
        return await self._links.attach(self._session, owner_type, owner_id, tag_id, group=group)

    async def untag(self, owner_type: Any, owner_id: Any, tag_id: int) -> bool:
        """Remove a tag from an owner (from every group).

        Returns:
            True if the owner had the tag
        """
        return await self._links.detach(self._session, owner_type, owner_id, tag_id)

    async def sync_tags(self, owner_type: Any, owner_id: Any, tag_ids: Sequence[int]) -> Sequence[Tag]:
        """Make the owner's default-group tags exactly ``tag_ids``, in that order.

        Raises:
            InvalidOwnerTypeError: If the owner kind cannot be tagged
            NotFoundError: If any of the tags does not exist
        """
        owner = self._links.validate_owner(owner_type)
        wanted = list(dict.fromkeys(tag_ids))
        found = await self._repo.get_tags_by_ids(self._session, wanted)
        missing = set(wanted) - {tag.id for tag in found}
        if missing:
            raise NotFoundError("Tag", {"ids": sorted(missing)})

        group = normalize_group(None)
        current = await self._links.list_by_owner(self._session, owner, owner_id, group=group)
        for link in current:
            if link.tag_id not in wanted:
                await self._links.detach(self._session, owner, owner_id, link.tag_id, group=group)
        for position, tag_id in enumerate(wanted):
            await self._links.attach(
                self._session, owner, owner_id, tag_id, group=group, sort_order=position
            )

        logger.info(
            "Tags synced",
            extra={"owner_type": owner.value, "owner_id": str(owner_id), "tag_count": len(wanted)},
        )
        return await self.tags_for(owner, owner_id, group=group)

    async def tags_for(self, owner_type: Any, owner_id: Any, *, group: str | None = None) -> Sequence[Tag]:
        """Tags of an owner in display order.

        Raises:
            InvalidOwnerTypeError: If the owner kind cannot be tagged
        """
        owner = self._links.validate_owner(owner_type)
        return await self._repo.list_for_owner(
            self._session,
            owner,
            str(owner_id),
            group=normalize_group(group) if group is not None else None,
        )

    async def owners_of(self, tag_id: int) -> Sequence[TaggedEntity]:
        """Every owner link of a tag, oldest first.

        Raises:
            NotFoundError: If tag not found
        """
        await self.get_tag(tag_id)
        return await self._links.list_by_attachable(self._session, tag_id)

    async def _ensure_unique(self, name: str, slug: str | None) -> None:
        if await self._repo.get_by_name(self._session, name):
            raise ConflictException(
                detail=f"Tag with name '{name}' already exists",
                type="tag-name-exists",
                extra={"name": name},
            )
        if slug is not None and await self._repo.get_by_slug(self._session, slug):
            raise ConflictException(
                detail=f"Tag with slug '{slug}' already exists",
                type="tag-slug-exists",
                extra={"slug": slug},
            )
