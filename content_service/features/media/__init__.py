"""Media feature: file metadata and media collections on owners."""

from __future__ import annotations

from .models import Media, Mediable, StorageDisk
from .repository import (
    MediableRepository,
    MediaRepository,
    get_media_repository,
    get_mediable_repository,
)
from .schemas import AttachMediaRequest, MediaCreate, MediaResponse, ReorderMediaRequest
from .service import MediaService

__all__ = [
    "AttachMediaRequest",
    "Media",
    "MediaCreate",
    "MediaRepository",
    "MediaResponse",
    "MediaService",
    "Mediable",
    "MediableRepository",
    "ReorderMediaRequest",
    "StorageDisk",
    "get_media_repository",
    "get_mediable_repository",
]
