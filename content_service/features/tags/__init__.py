"""Tags feature: labels attachable to posts, users, media, categories and comments."""

from __future__ import annotations

from .models import DEFAULT_TAG_COLORS, Tag, TaggedEntity, TagType
from .repository import (
    TaggableRepository,
    TagRepository,
    get_tag_repository,
    get_taggable_repository,
)
from .schemas import TagCreate, TagResponse, TagUpdate
from .service import TagService

__all__ = [
    "DEFAULT_TAG_COLORS",
    "Tag",
    "TagCreate",
    "TagRepository",
    "TagResponse",
    "TagService",
    "TagType",
    "TagUpdate",
    "TaggableRepository",
    "TaggedEntity",
    "get_tag_repository",
    "get_taggable_repository",
]
