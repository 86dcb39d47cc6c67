"""Service layer for the comments feature."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from content_service.core.database import CircularReferenceError, InvalidParentError
from content_service.core.exceptions import InvalidTransitionError
from content_service.core.workflow import COMMENT_TRANSITIONS, CommentStatus, is_valid_transition
from content_service.features.comments.models import Comment
from content_service.features.comments.repository import CommentRepository, get_comment_repository
from content_service.features.posts.repository import get_post_repository
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.comments.schemas import CommentCreate, CommentUpdate


logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class CommentService:
    """Service for threaded comments.

    Handles business logic for:
    - Posting comments and replies (a reply stays on its parent's post)
    - Moderation workflow (pending -> approved/rejected, rejected -> approved,
      approved -> rejected)
    - Thread reads
    """

    def __init__(
        self,
        session: AsyncSession,
        repo: CommentRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_comment_repository()

    async def get_comment(self, comment_id: int) -> Comment:
        """Get a comment by ID.

        Raises:
            NotFoundError: If comment not found
        """
        return await self._repo.get_or_raise(self._session, comment_id)

    async def create_comment(self, payload: CommentCreate) -> Comment:
        """Post a comment, or a reply when ``parent_id`` is set.

        New comments start as pending.

        Raises:
            NotFoundError: If the post does not exist
            InvalidParentError: If the parent comment does not exist or
                belongs to another post
        """
        await get_post_repository().get_or_raise(self._session, payload.post_id)
        if payload.parent_id is not None:
            await self._check_parent(payload.parent_id, payload.post_id)

        comment = Comment(
            post_id=payload.post_id,
            user_id=payload.user_id,
            content=payload.content,
            status=CommentStatus.PENDING.value,
        )
        created = await self._repo.insert_node(self._session, comment, payload.parent_id)

        logger.info(
            "Comment created",
            extra={
                "comment_id": created.id,
                "post_id": created.post_id,
                "parent_id": created.parent_id,
                "depth": created.depth,
            },
        )
        return created

    async def update_content(self, comment_id: int, payload: CommentUpdate) -> Comment:
        comment = await self.get_comment(comment_id)
        comment.content = payload.content
        await self._session.flush()
        await self._session.refresh(comment)

        lazy_logger.debug(lambda: f"service.update_content({comment_id}) -> {comment.word_count} words")
        return comment

    async def move_comment(self, comment_id: int, parent_id: int | None) -> Comment:
        """Re-thread a comment (with its replies) under another comment of the same post.

        Raises:
            NotFoundError: If the comment does not exist
            CircularReferenceError: If the target is the comment or one of its replies
            InvalidParentError: If the target belongs to another post
        """
        if parent_id is not None and parent_id == comment_id:
            raise CircularReferenceError("Comment", comment_id, parent_id)
        comment = await self.get_comment(comment_id)
        if parent_id is not None:
            await self._check_parent(parent_id, comment.post_id)
        return await self._repo.move_node(self._session, comment_id, parent_id)

    async def change_status(self, comment_id: int, to_status: CommentStatus) -> Comment:
        """Apply a moderation decision.

        Raises:
            NotFoundError: If comment not found
            InvalidTransitionError: If the transition is not allowed
        """
        comment = await self.get_comment(comment_id)
        from_status = CommentStatus(comment.status)
        if not is_valid_transition(COMMENT_TRANSITIONS, from_status, to_status):
            raise InvalidTransitionError("Comment", from_status, to_status, comment_id)

        comment.status = to_status.value
        await self._session.flush()
        await self._session.refresh(comment)

        logger.info(
            "Comment moderated",
            extra={
                "comment_id": comment_id,
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        return comment

    async def approve(self, comment_id: int) -> Comment:
        return await self.change_status(comment_id, CommentStatus.APPROVED)

    async def reject(self, comment_id: int) -> Comment:
        return await self.change_status(comment_id, CommentStatus.REJECTED)

    async def delete_comment(self, comment_id: int, *, cascade: bool = False) -> int:
        """Delete a comment, and its replies when ``cascade`` is set.

        Returns:
            Number of comments removed

        Raises:
            NotFoundError: If comment not found
            HasChildrenError: If it has replies and cascade is False
        """
        removed = await self._repo.delete_node(self._session, comment_id, cascade=cascade)
        logger.info(
            "Comment deleted",
            extra={"comment_id": comment_id, "removed": removed, "cascade": cascade},
        )
        return removed

    async def get_thread(self, post_id: int, *, approved_only: bool = False) -> Sequence[Comment]:
        """Comments of a post in reading order (each reply after its parent)."""
        return await self._repo.list_thread(self._session, post_id, approved_only=approved_only)

    async def get_replies(self, comment_id: int) -> Sequence[Comment]:
        """Direct replies to a comment."""
        return await self._repo.get_children(self._session, comment_id)

    async def get_context(self, comment_id: int) -> Sequence[Comment]:
        """The chain of comments a reply answers, thread root first."""
        return await self._repo.get_ancestors(self._session, comment_id)

    async def get_parent(self, comment_id: int) -> Comment | None:
        """The comment this one replies to, or None for a top-level comment."""
        return await self._repo.get_parent(self._session, comment_id)

    async def get_comments_by_user(
        self,
        user_id: int,
        *,
        approved_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[Comment], int]:
        """A user's comments across posts, newest first, with the total count."""
        return await self._repo.list_by_user(
            self._session, user_id, approved_only=approved_only, limit=limit, offset=offset
        )

    async def get_reply_count(self, comment_id: int) -> int:
        comment = await self.get_comment(comment_id)
        return comment.reply_count

    async def _check_parent(self, parent_id: int, post_id: int) -> Comment:
        parent = await self._repo.get(self._session, parent_id)
        if parent is None:
            raise InvalidParentError("Comment", parent_id)
        if parent.post_id != post_id:
            raise InvalidParentError(
                "Comment",
                parent_id,
                reason=f"parent belongs to post {parent.post_id}, not post {post_id}",
            )
        return parent
