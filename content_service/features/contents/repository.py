"""Repository for the contents feature."""

from __future__ import annotations

from content_service.core.database import OwnedRepository
from content_service.features.contents.models import ContentBlock


class ContentRepository(OwnedRepository[ContentBlock]):
    """Owner-scoped content blocks, partitioned under AttachableKind.CONTENT.

    Inherits from OwnedRepository:
        - list_by_owner, count_by_owner, detach_all, reorder, next_sort_order
    """

    def __init__(self) -> None:
        """Initialize with ContentBlock model."""
        super().__init__(ContentBlock)


# Factory function for dependency injection
_content_repository: ContentRepository | None = None


def get_content_repository() -> ContentRepository:
    """Get ContentRepository instance."""
    global _content_repository
    if _content_repository is None:
        _content_repository = ContentRepository()
    return _content_repository
