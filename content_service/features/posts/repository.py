"""Repository for the posts feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from content_service.core.database import BaseRepository
from content_service.features.posts.models import Post

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.workflow import PostStatus


class PostRepository(BaseRepository[Post]):
    """Repository for Post model."""

    def __init__(self) -> None:
        """Initialize with Post model."""
        super().__init__(Post)

    async def get_by_slug(self, session: AsyncSession, slug: str) -> Post | None:
        return await self.get_by(session, Post.slug, slug)

    async def list_posts(
        self,
        session: AsyncSession,
        *,
        status: PostStatus | None = None,
        category_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Post]:
        """List posts newest first, optionally filtered.

        Args:
            session: Database session
            status: Only posts in this workflow state
            category_id: Only posts in this category
            limit: Page size
            offset: Results to skip
        """
        stmt = select(Post)
        if status is not None:
            stmt = stmt.where(Post.status == status.value)
        if category_id is not None:
            stmt = stmt.where(Post.category_id == category_id)
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit).offset(offset)

        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list_posts(status={status}, category_id={category_id}) -> {len(items)} items"
        )
        return items

    async def count_by_category(self, session: AsyncSession, category_id: int) -> int:
        """Posts filed directly under a category."""
        stmt = select(func.count()).select_from(Post).where(Post.category_id == category_id)
        return (await session.execute(stmt)).scalar_one()


# Factory function for dependency injection
_post_repository: PostRepository | None = None


def get_post_repository() -> PostRepository:
    """Get PostRepository instance."""
    global _post_repository
    if _post_repository is None:
        _post_repository = PostRepository()
    return _post_repository
