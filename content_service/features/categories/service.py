"""Service layer for the categories feature."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from content_service.core.database import CircularReferenceError
from content_service.core.exceptions import ConflictException, ValidationException
from content_service.features.categories.models import Category
from content_service.features.categories.repository import (
    CategoryRepository,
    get_category_repository,
)
from content_service.features.categories.schemas import CategoryStats, slugify
from content_service.features.posts.repository import get_post_repository
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.categories.schemas import CategoryCreate, CategoryUpdate


# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)

BREADCRUMB_SEPARATOR = " > "


class CategoryService:
    """Service for category management.

    Handles business logic for:
    - Name and slug uniqueness, slug generation
    - Placement in the category forest (create, move, delete)
    - Activation state
    - Tree reads and breadcrumbs
    """

    def __init__(
        self,
        session: AsyncSession,
        repo: CategoryRepository | None = None,
    ) -> None:
        """Initialize the category service.

        Args:
            session: Database session for operations
            repo: Category repository (optional, uses default if not provided)
        """
        self._session = session
        self._repo = repo or get_category_repository()

    async def get_category(self, category_id: int) -> Category:
        """Get a category by ID.

        Raises:
            NotFoundError: If category not found
        """
        return await self._repo.get_or_raise(self._session, category_id)

    async def get_by_slug(self, slug: str) -> Category | None:
        return await self._repo.get_by_slug(self._session, slug)

    async def create_category(self, payload: CategoryCreate) -> Category:
        """Create a category as the last child of ``payload.parent_id``.

        Args:
            payload: Category creation data

        Returns:
            Created category with its interval bounds

        Raises:
            ValidationException: If no usable slug can be derived from the name
            ConflictException: If name or slug already exists
            InvalidParentError: If the parent does not exist
        """
        slug = payload.slug or self._derive_slug(payload.name)
        await self._ensure_unique(name=payload.name, slug=slug)

        category = Category(
            name=payload.name,
            slug=slug,
            description=payload.description,
            is_active=payload.is_active,
        )
        created = await self._repo.insert_node(self._session, category, payload.parent_id)

        logger.info(
            "Category created",
            extra={
                "category_id": created.id,
                "slug": created.slug,
                "parent_id": created.parent_id,
            },
        )
        return created

    async def update_category(self, category_id: int, payload: CategoryUpdate) -> Category:
        """Update fields and, when ``parent_id`` is sent, re-parent.

        Raises:
            NotFoundError: If category not found
            ConflictException: If the new name or slug is taken
            CircularReferenceError: If the new parent is the category or one
                of its descendants
            InvalidParentError: If the new parent does not exist
        """
        category = await self.get_category(category_id)
        fields = payload.model_fields_set

        if "parent_id" in fields and payload.parent_id == category_id:
            raise CircularReferenceError("Category", category_id, payload.parent_id)

        new_name = payload.name if payload.name not in (None, category.name) else None
        new_slug = payload.slug if payload.slug not in (None, category.slug) else None
        await self._ensure_unique(name=new_name, slug=new_slug)

        if "parent_id" in fields and payload.parent_id != category.parent_id:
            category = await self._repo.move_node(self._session, category_id, payload.parent_id)

        if new_name is not None:
            category.name = new_name
        if new_slug is not None:
            category.slug = new_slug
        if payload.description is not None:
            category.description = payload.description
        if payload.is_active is not None:
            category.is_active = payload.is_active
        await self._session.flush()
        await self._session.refresh(category)

        lazy_logger.debug(lambda: f"service.update_category({category_id}) -> updated {sorted(fields)}")
        return category

    async def move_category(self, category_id: int, parent_id: int | None) -> Category:
        """Move a category and its subtree under ``parent_id`` (None = root).

        Raises:
            NotFoundError: If category not found
            CircularReferenceError: If the target is the category or a descendant
            InvalidParentError: If the target parent does not exist
        """
        return await self._repo.move_node(self._session, category_id, parent_id)

    async def delete_category(self, category_id: int, *, cascade: bool = False) -> int:
        """Delete a category, and its subtree when ``cascade`` is set.

        Returns:
            Number of categories removed

        Raises:
            NotFoundError: If category not found
            HasChildrenError: If it has sub-categories and cascade is False
        """
        removed = await self._repo.delete_node(self._session, category_id, cascade=cascade)
        logger.info(
            "Category deleted",
            extra={"category_id": category_id, "removed": removed, "cascade": cascade},
        )
        return removed

    async def set_active(self, category_id: int, *, active: bool) -> Category:
        category = await self.get_category(category_id)
        category.is_active = active
        await self._session.flush()
        await self._session.refresh(category)

        lazy_logger.debug(lambda: f"service.set_active({category_id}, active={active})")
        return category

    async def activate(self, category_id: int) -> Category:
        return await self.set_active(category_id, active=True)

    async def deactivate(self, category_id: int) -> Category:
        return await self.set_active(category_id, active=False)

    # ------------------------------------------------------------------
    # Tree reads
    # ------------------------------------------------------------------

    async def get_tree(self, *, active_only: bool = False) -> Sequence[Category]:
        """Every category in pre-order."""
        if active_only:
            return await self._repo.list_active(self._session)
        return await self._repo.get_tree(self._session)

    async def get_roots(self) -> Sequence[Category]:
        return await self._repo.get_roots(self._session)

    async def get_children(self, category_id: int) -> Sequence[Category]:
        return await self._repo.get_children(self._session, category_id)

    async def get_ancestors(self, category_id: int, *, include_self: bool = False) -> Sequence[Category]:
        return await self._repo.get_ancestors(self._session, category_id, include_self=include_self)

    async def get_descendants(
        self,
        category_id: int,
        *,
        include_self: bool = False,
        max_depth: int | None = None,
    ) -> Sequence[Category]:
        return await self._repo.get_descendants(
            self._session, category_id, include_self=include_self, max_depth=max_depth
        )

    async def get_siblings(self, category_id: int, *, include_self: bool = False) -> Sequence[Category]:
        return await self._repo.get_siblings(self._session, category_id, include_self=include_self)

    async def get_parent(self, category_id: int) -> Category | None:
        return await self._repo.get_parent(self._session, category_id)

    async def search_categories(self, query: str, *, active_only: bool = False) -> Sequence[Category]:
        """Categories matching ``query`` in name, slug or description, in tree order."""
        query = query.strip()
        if not query:
            return []
        return await self._repo.search(self._session, query, active_only=active_only)

    async def get_category_count(self, *, active_only: bool = False) -> int:
        return await self._repo.count(self._session, active_only=active_only)

    async def get_category_stats(self, category_id: int) -> CategoryStats:
        """Post and child counts plus placement of one category.

        Raises:
            NotFoundError: If category not found
        """
        category = await self.get_category(category_id)
        return CategoryStats(
            category_id=category.id,
            post_count=await get_post_repository().count_by_category(self._session, category_id),
            child_count=await self._repo.count_children(self._session, category_id),
            descendant_count=category.descendant_count,
            depth=category.depth,
            is_root=category.parent_id is None,
            is_active=category.is_active,
        )

    async def get_breadcrumb(
        self,
        category_id: int,
        *,
        separator: str = BREADCRUMB_SEPARATOR,
    ) -> tuple[Sequence[Category], str]:
        """Root-to-category path and its display string.

        Example:
            items, path = await service.get_breadcrumb(ai.id)
            # path == "News > Technology > AI"
        """
        items = await self.get_ancestors(category_id, include_self=True)
        return items, separator.join(item.name for item in items)

    async def rebuild_tree(self) -> int:
        """Recompute every interval from parent links.

        Returns:
            Number of categories whose bounds changed
        """
        return await self._repo.rebuild(self._session)

    async def check_integrity(self) -> int:
        return await self._repo.check_integrity(self._session)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _derive_slug(name: str) -> str:
        slug = slugify(name)
        if len(slug) < 2:
            raise ValidationException(
                detail=f"Cannot derive a slug from name {name!r}; provide one explicitly",
                type="category-slug-required",
                extra={"name": name},
            )
        return slug[:100].rstrip("-")

    async def _ensure_unique(self, *, name: str | None, slug: str | None) -> None:
        if name is not None and await self._repo.get_by_name(self._session, name):
            raise ConflictException(
                detail=f"Category with name '{name}' already exists",
                type="category-name-exists",
                extra={"name": name},
            )
        if slug is not None and await self._repo.get_by_slug(self._session, slug):
            raise ConflictException(
                detail=f"Category with slug '{slug}' already exists",
                type="category-slug-exists",
                extra={"slug": slug},
            )
