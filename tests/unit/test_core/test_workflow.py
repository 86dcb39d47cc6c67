"""Unit tests for post and comment workflows."""

from __future__ import annotations

import pytest

from content_service.core.workflow import (
    COMMENT_TRANSITIONS,
    POST_TRANSITIONS,
    CommentStatus,
    PostStatus,
    is_valid_transition,
)


@pytest.mark.parametrize(
    ("from_status", "to_status", "allowed"),
    [
        (PostStatus.DRAFT, PostStatus.PUBLISHED, True),
        (PostStatus.DRAFT, PostStatus.ARCHIVED, True),
        (PostStatus.PUBLISHED, PostStatus.DRAFT, True),
        (PostStatus.PUBLISHED, PostStatus.ARCHIVED, True),
        (PostStatus.ARCHIVED, PostStatus.DRAFT, False),
        (PostStatus.ARCHIVED, PostStatus.PUBLISHED, False),
        (PostStatus.DRAFT, PostStatus.DRAFT, False),
    ],
)
def test_post_transitions(from_status, to_status, allowed):
    assert is_valid_transition(POST_TRANSITIONS, from_status, to_status) is allowed


@pytest.mark.parametrize(
    ("from_status", "to_status", "allowed"),
    [
        (CommentStatus.PENDING, CommentStatus.APPROVED, True),
        (CommentStatus.PENDING, CommentStatus.REJECTED, True),
        (CommentStatus.APPROVED, CommentStatus.REJECTED, True),
        (CommentStatus.REJECTED, CommentStatus.APPROVED, True),
        (CommentStatus.APPROVED, CommentStatus.PENDING, False),
    ],
)
def test_comment_transitions(from_status, to_status, allowed):
    assert is_valid_transition(COMMENT_TRANSITIONS, from_status, to_status) is allowed
