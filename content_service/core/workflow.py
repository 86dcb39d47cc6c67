"""Status workflows for posts and comments."""

from __future__ import annotations

from enum import StrEnum
from typing import TypeVar


class PostStatus(StrEnum):
    """Publication state of a post.

    Attributes:
        DRAFT: Being written, not visible
        PUBLISHED: Visible to readers
        ARCHIVED: Retired; terminal
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class CommentStatus(StrEnum):
    """Moderation state of a comment."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Valid state transitions (from_state -> set of valid to_states)
POST_TRANSITIONS: dict[PostStatus, set[PostStatus]] = {
    PostStatus.DRAFT: {PostStatus.PUBLISHED, PostStatus.ARCHIVED},
    PostStatus.PUBLISHED: {PostStatus.DRAFT, PostStatus.ARCHIVED},
    PostStatus.ARCHIVED: set(),  # Terminal state
}

COMMENT_TRANSITIONS: dict[CommentStatus, set[CommentStatus]] = {
    CommentStatus.PENDING: {CommentStatus.APPROVED, CommentStatus.REJECTED},
    CommentStatus.APPROVED: {CommentStatus.REJECTED},
    CommentStatus.REJECTED: {CommentStatus.APPROVED},
}


S = TypeVar("S", bound=StrEnum)


def is_valid_transition(
    transitions: dict[S, set[S]],
    from_status: S,
    to_status: S,
) -> bool:
    """Check if a state transition is valid.

    Args:
        transitions: Workflow table (POST_TRANSITIONS or COMMENT_TRANSITIONS)
        from_status: Current status
        to_status: Desired new status

    Returns:
        True if the transition is allowed, False otherwise
    """
    return to_status in transitions.get(from_status, set())


__all__ = [
    "COMMENT_TRANSITIONS",
    "POST_TRANSITIONS",
    "CommentStatus",
    "PostStatus",
    "is_valid_transition",
]
