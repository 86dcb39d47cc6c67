"""Comments feature: moderated, threaded comments on posts."""

from __future__ import annotations

from .models import Comment
from .repository import CommentRepository, get_comment_repository
from .schemas import CommentCreate, CommentResponse, CommentUpdate
from .service import CommentService

__all__ = [
    "Comment",
    "CommentCreate",
    "CommentRepository",
    "CommentResponse",
    "CommentService",
    "CommentUpdate",
    "get_comment_repository",
]
