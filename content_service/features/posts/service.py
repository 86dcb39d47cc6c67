"""Service layer for the posts feature."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from content_service.core.database import OwnerType
from content_service.core.exceptions import ConflictException, InvalidTransitionError, ValidationException
from content_service.core.workflow import POST_TRANSITIONS, PostStatus, is_valid_transition
from content_service.features.categories.repository import get_category_repository
from content_service.features.categories.schemas import slugify
from content_service.features.comments.repository import get_comment_repository
from content_service.features.contents.repository import get_content_repository
from content_service.features.media.repository import get_mediable_repository
from content_service.features.posts.models import Post
from content_service.features.posts.repository import PostRepository, get_post_repository
from content_service.features.tags.repository import get_taggable_repository
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.features.posts.schemas import PostCreate, PostUpdate


logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class PostService:
    """Service for posts and their publication workflow.

    Workflow:
        draft -> published, draft -> archived
        published -> draft, published -> archived
        archived is terminal
    """

    def __init__(
        self,
        session: AsyncSession,
        repo: PostRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_post_repository()

    async def get_post(self, post_id: int) -> Post:
        """Get a post by ID.

        Raises:
            NotFoundError: If post not found
        """
        return await self._repo.get_or_raise(self._session, post_id)

    async def list_posts(
        self,
        *,
        status: PostStatus | None = None,
        category_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Post]:
        return await self._repo.list_posts(
            self._session, status=status, category_id=category_id, limit=limit, offset=offset
        )

    async def create_post(self, payload: PostCreate) -> Post:
        """Create a draft post.

        Raises:
            ConflictException: If the slug is taken
            ValidationException: If no slug can be derived from the title
            NotFoundError: If the category does not exist
        """
        slug = payload.slug or slugify(payload.title)[:200].rstrip("-")
        if not slug:
            raise ValidationException(
                detail=f"Cannot derive a slug from title {payload.title!r}; provide one explicitly",
                type="post-slug-required",
                extra={"title": payload.title},
            )
        await self._ensure_slug_free(slug)
        if payload.category_id is not None:
            await get_category_repository().get_or_raise(self._session, payload.category_id)

        post = Post(
            title=payload.title,
            slug=slug,
            excerpt=payload.excerpt,
            body=payload.body,
            author_id=payload.author_id,
            category_id=payload.category_id,
            status=PostStatus.DRAFT.value,
        )
        created = await self._repo.create(self._session, post)

        logger.info("Post created", extra={"post_id": created.id, "slug": created.slug})
        return created

    async def update_post(self, post_id: int, payload: PostUpdate) -> Post:
        """Update a post's content fields.

        Raises:
            NotFoundError: If the post or the new category does not exist
            ConflictException: If the new slug is taken
        """
        post = await self.get_post(post_id)

        if payload.slug is not None and payload.slug != post.slug:
            await self._ensure_slug_free(payload.slug)
            post.slug = payload.slug
        if payload.title is not None:
            post.title = payload.title.strip()
        if payload.excerpt is not None:
            post.excerpt = payload.excerpt
        if payload.body is not None:
            post.body = payload.body
        if "category_id" in payload.model_fields_set:
            if payload.category_id is not None:
                await get_category_repository().get_or_raise(self._session, payload.category_id)
            post.category_id = payload.category_id

        await self._session.flush()
        await self._session.refresh(post)

        lazy_logger.debug(lambda: f"service.update_post({post_id}) -> updated")
        return post

    async def change_status(self, post_id: int, to_status: PostStatus) -> Post:
        """Move a post through its workflow.

        Raises:
            NotFoundError: If post not found
            InvalidTransitionError: If the transition is not allowed
        """
        post = await self.get_post(post_id)
        from_status = PostStatus(post.status)
        if not is_valid_transition(POST_TRANSITIONS, from_status, to_status):
            raise InvalidTransitionError("Post", from_status, to_status, post_id)

        post.status = to_status.value
        if to_status is PostStatus.PUBLISHED and post.published_at is None:
            post.published_at = datetime.now(UTC)

        await self._session.flush()
        await self._session.refresh(post)

        logger.info(
            "Post status changed",
            extra={"post_id": post_id, "from_status": from_status.value, "to_status": to_status.value},
        )
        return post

    async def publish(self, post_id: int) -> Post:
        return await self.change_status(post_id, PostStatus.PUBLISHED)

    async def unpublish(self, post_id: int) -> Post:
        return await self.change_status(post_id, PostStatus.DRAFT)

    async def archive(self, post_id: int) -> Post:
        return await self.change_status(post_id, PostStatus.ARCHIVED)

    async def delete_post(self, post_id: int) -> None:
        """Delete a post with its comment threads and attachments.

        Comment threads are removed through the comment forest so its
        numbering stays dense; tag, media and content links are detached.

        Raises:
            NotFoundError: If post not found
        """
        post = await self.get_post(post_id)

        comments = get_comment_repository()
        removed_comments = 0
        for root in await comments.list_thread_roots(self._session, post_id):
            removed_comments += await comments.delete_node(self._session, root.id, cascade=True)

        detached = 0
        for repo in (get_taggable_repository(), get_mediable_repository(), get_content_repository()):
            detached += await repo.detach_all(self._session, OwnerType.POST, post_id)

        await self._repo.delete(self._session, post)

        logger.info(
            "Post deleted",
            extra={"post_id": post_id, "comments_removed": removed_comments, "detached": detached},
        )

    async def _ensure_slug_free(self, slug: str) -> None:
        if await self._repo.get_by_slug(self._session, slug):
            raise ConflictException(
                detail=f"Post with slug '{slug}' already exists",
                type="post-slug-exists",
                extra={"slug": slug},
            )
