"""Repository for the comments feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from content_service.core.database import NestedSetRepository
from content_service.core.settings import get_hierarchy_settings
from content_service.core.workflow import CommentStatus
from content_service.features.comments.models import Comment

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class CommentRepository(NestedSetRepository[Comment]):
    """Repository for Comment model.

    Inherits the nested-set operations from NestedSetRepository.
    """

    def __init__(self, *, lock_timeout_ms: int | None = None) -> None:
        """Initialize with Comment model."""
        super().__init__(Comment, lock_timeout_ms=lock_timeout_ms)

    async def list_thread(
        self,
        session: AsyncSession,
        post_id: int,
        *,
        approved_only: bool = False,
    ) -> Sequence[Comment]:
        """Every comment of a post in thread (pre-)order.

        Args:
            session: Database session
            post_id: Post whose comments are listed
            approved_only: Skip pending and rejected comments
        """
        stmt = select(Comment).where(Comment.post_id == post_id)
        if approved_only:
            stmt = stmt.where(Comment.status == CommentStatus.APPROVED.value)
        stmt = stmt.order_by(Comment.left)

        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list_thread(post_id={post_id}, approved_only={approved_only}) -> {len(items)} items"
        )
        return items

    async def list_thread_roots(self, session: AsyncSession, post_id: int) -> Sequence[Comment]:
        """Top-level comments of a post ordered by sibling position."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
            .order_by(Comment.ordering, Comment.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_user(
        self,
        session: AsyncSession,
        user_id: int,
        *,
        approved_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[Comment], int]:
        """One page of a user's comments, newest first, plus the total count.

        Args:
            session: Database session
            user_id: Author of the comments
            approved_only: Skip pending and rejected comments
            limit: Page size
            offset: Comments to skip

        Returns:
            (comments on this page, total comments for the user)
        """
        stmt = select(Comment).where(Comment.user_id == user_id)
        if approved_only:
            stmt = stmt.where(Comment.status == CommentStatus.APPROVED.value)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await session.execute(count_stmt)).scalar_one()

        stmt = stmt.order_by(Comment.created_at.desc(), Comment.id.desc()).limit(limit).offset(offset)
        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list_by_user(user_id={user_id}, offset={offset}) -> {len(items)}/{total} items"
        )
        return items, total


# Factory function for dependency injection
_comment_repository: CommentRepository | None = None


def get_comment_repository() -> CommentRepository:
    """Get CommentRepository instance."""
    global _comment_repository
    if _comment_repository is None:
        _comment_repository = CommentRepository(
            lock_timeout_ms=get_hierarchy_settings().lock_timeout_ms,
        )
    return _comment_repository
