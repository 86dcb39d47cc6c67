"""Contents feature: ordered content blocks attached to owners."""

from __future__ import annotations

from .models import ContentBlock, ContentType
from .repository import ContentRepository, get_content_repository
from .schemas import ContentCreate, ContentResponse, ContentUpdate
from .service import ContentService

__all__ = [
    "ContentBlock",
    "ContentCreate",
    "ContentRepository",
    "ContentResponse",
    "ContentService",
    "ContentType",
    "ContentUpdate",
    "get_content_repository",
]
