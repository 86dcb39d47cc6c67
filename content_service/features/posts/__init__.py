"""Posts feature: articles and their publication workflow."""

from __future__ import annotations

from .models import Post
from .repository import PostRepository, get_post_repository
from .schemas import PostCreate, PostResponse, PostUpdate
from .service import PostService

__all__ = [
    "Post",
    "PostCreate",
    "PostRepository",
    "PostResponse",
    "PostService",
    "PostUpdate",
    "get_post_repository",
]
