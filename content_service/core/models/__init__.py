"""Database models registry.

Import all models here so ``Base.metadata`` is complete for Alembic and for
``create_all`` in tests.
"""

from __future__ import annotations

from content_service.core.database.base import Base
from content_service.core.database.hierarchy.locking import NestedSetForest
from content_service.features.categories.models import Category
from content_service.features.comments.models import Comment
from content_service.features.contents.models import ContentBlock
from content_service.features.media.models import Media, Mediable
from content_service.features.menus.models import Menu
from content_service.features.posts.models import Post
from content_service.features.tags.models import Tag, TaggedEntity

__all__ = [
    "Base",
    "Category",
    "Comment",
    "ContentBlock",
    "Media",
    "Mediable",
    "Menu",
    "NestedSetForest",
    "Post",
    "Tag",
    "TaggedEntity",
]
