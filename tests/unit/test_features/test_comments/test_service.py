"""Unit tests for CommentService."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from content_service.core.database import (
    CircularReferenceError,
    HasChildrenError,
    InvalidParentError,
    NotFoundError,
)
from content_service.core.exceptions import InvalidTransitionError
from content_service.core.workflow import CommentStatus
from content_service.features.comments.schemas import CommentCreate, CommentUpdate
from content_service.features.comments.service import CommentService
from content_service.features.posts.schemas import PostCreate
from content_service.features.posts.service import PostService


@pytest.fixture
def service(db_session) -> CommentService:
    return CommentService(db_session)


@pytest.fixture
async def posts(db_session):
    post_service = PostService(db_session)
    first = await post_service.create_post(PostCreate(title="First post"))
    second = await post_service.create_post(PostCreate(title="Second post"))
    return first, second


async def _comment(
    service: CommentService, post_id: int, text: str, parent_id: int | None = None, user_id: int = 1
):
    return await service.create_comment(
        CommentCreate(post_id=post_id, user_id=user_id, content=text, parent_id=parent_id)
    )


class TestCommentSchemas:
    """Tests for comment payload validation."""

    def test_content_is_trimmed(self):
        payload = CommentCreate(post_id=1, user_id=1, content="  hello  ")

        assert payload.content == "hello"

    def test_blank_content_rejected(self):
        with pytest.raises(ValidationError):
            CommentCreate(post_id=1, user_id=1, content="   ")

    def test_blank_update_rejected(self):
        with pytest.raises(ValidationError):
            CommentUpdate(content="\n")


class TestCreateComment:
    """Tests for posting comments and replies."""

    async def test_new_comment_is_pending(self, service, posts):
        comment = await _comment(service, posts[0].id, "Nice read")

        assert comment.status == CommentStatus.PENDING
        assert comment.depth == 0
        assert comment.reply_count == 0

    async def test_reply_nests_under_parent(self, service, posts):
        root = await _comment(service, posts[0].id, "Question?")
        reply = await _comment(service, posts[0].id, "Answer.", root.id)

        await service._session.refresh(root)
        assert reply.parent_id == root.id
        assert reply.depth == 1
        assert root.left < reply.left < reply.right < root.right
        assert await service.get_reply_count(root.id) == 1

    async def test_unknown_post(self, service):
        with pytest.raises(NotFoundError):
            await _comment(service, 404, "Hello")

    async def test_missing_parent(self, service, posts):
        with pytest.raises(InvalidParentError):
            await _comment(service, posts[0].id, "Reply", 999)

    async def test_parent_on_other_post(self, service, posts):
        root = await _comment(service, posts[0].id, "On the first post")

        with pytest.raises(InvalidParentError) as exc_info:
            await _comment(service, posts[1].id, "Wrong thread", root.id)

        assert "belongs to post" in exc_info.value.reason


class TestModeration:
    """Tests for the moderation workflow."""

    async def test_approve_then_reject(self, service, posts):
        comment = await _comment(service, posts[0].id, "Hi")

        approved = await service.approve(comment.id)
        assert approved.status == CommentStatus.APPROVED
        assert approved.is_approved
        assert (await service.reject(comment.id)).status == CommentStatus.REJECTED
        assert (await service.approve(comment.id)).status == CommentStatus.APPROVED

    async def test_back_to_pending_is_invalid(self, service, posts):
        comment = await _comment(service, posts[0].id, "Hi")
        await service.approve(comment.id)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.change_status(comment.id, CommentStatus.PENDING)

        assert exc_info.value.status_code == 409
        assert exc_info.value.type == "invalid-status-transition"

    async def test_approved_only_thread(self, service, posts):
        first = await _comment(service, posts[0].id, "Visible")
        await _comment(service, posts[0].id, "Hidden")
        await service.approve(first.id)

        thread = await service.get_thread(posts[0].id, approved_only=True)

        assert [c.content for c in thread] == ["Visible"]


class TestThreads:
    """Tests for thread reads, edits and deletion."""

    async def test_thread_reading_order(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        b = await _comment(service, posts[0].id, "B")
        await _comment(service, posts[0].id, "A.1", a.id)
        await _comment(service, posts[1].id, "Elsewhere")
        await _comment(service, posts[0].id, "B.1", b.id)

        thread = await service.get_thread(posts[0].id)

        assert [c.content for c in thread] == ["A", "A.1", "B", "B.1"]

    async def test_context_and_replies(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        a1 = await _comment(service, posts[0].id, "A.1", a.id)
        a11 = await _comment(service, posts[0].id, "A.1.1", a1.id)

        context = await service.get_context(a11.id)
        replies = await service.get_replies(a.id)

        assert [c.content for c in context] == ["A", "A.1"]
        assert [c.content for c in replies] == ["A.1"]

    async def test_update_content(self, service, posts):
        comment = await _comment(service, posts[0].id, "tpyo")

        updated = await service.update_content(comment.id, CommentUpdate(content=" typo fixed "))

        assert updated.content == "typo fixed"
        assert updated.word_count == 2

    async def test_move_comment(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        b = await _comment(service, posts[0].id, "B")

        moved = await service.move_comment(b.id, a.id)

        assert moved.parent_id == a.id
        assert moved.depth == 1

    async def test_move_under_own_reply(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        a1 = await _comment(service, posts[0].id, "A.1", a.id)

        with pytest.raises(CircularReferenceError):
            await service.move_comment(a.id, a1.id)

    async def test_move_across_posts(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        other = await _comment(service, posts[1].id, "Other")

        with pytest.raises(InvalidParentError):
            await service.move_comment(a.id, other.id)

    async def test_delete_with_replies(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        await _comment(service, posts[0].id, "A.1", a.id)

        with pytest.raises(HasChildrenError):
            await service.delete_comment(a.id)

        assert await service.delete_comment(a.id, cascade=True) == 2
        assert await service.get_thread(posts[0].id) == []

    async def test_parent(self, service, posts):
        a = await _comment(service, posts[0].id, "A")
        a1 = await _comment(service, posts[0].id, "A.1", a.id)

        parent = await service.get_parent(a1.id)

        assert parent is not None
        assert parent.id == a.id
        assert await service.get_parent(a.id) is None

    async def test_parent_of_missing_comment(self, service):
        with pytest.raises(NotFoundError):
            await service.get_parent(404)


class TestCommentsByUser:
    """Tests for listing one user's comments."""

    async def test_newest_first_across_posts(self, service, posts):
        first = await _comment(service, posts[0].id, "First", user_id=7)
        await _comment(service, posts[0].id, "Someone else", user_id=8)
        second = await _comment(service, posts[1].id, "Second", user_id=7)
        third = await _comment(service, posts[0].id, "Reply", first.id, user_id=7)

        comments, total = await service.get_comments_by_user(7)

        assert total == 3
        assert [c.id for c in comments] == [third.id, second.id, first.id]

    async def test_pagination_keeps_total(self, service, posts):
        for n in range(5):
            await _comment(service, posts[0].id, f"Comment {n}", user_id=7)

        page, total = await service.get_comments_by_user(7, limit=2, offset=4)

        assert total == 5
        assert [c.content for c in page] == ["Comment 0"]

    async def test_approved_only(self, service, posts):
        kept = await _comment(service, posts[0].id, "Approved", user_id=7)
        await _comment(service, posts[0].id, "Pending", user_id=7)
        await service.approve(kept.id)

        comments, total = await service.get_comments_by_user(7, approved_only=True)

        assert total == 1
        assert [c.id for c in comments] == [kept.id]

    async def test_user_without_comments(self, service, posts):
        assert await service.get_comments_by_user(99) == ([], 0)
