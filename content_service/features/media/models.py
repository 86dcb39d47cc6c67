"""SQLAlchemy models for the media feature."""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import (
    AssociationMixin,
    AttachableKind,
    TimestampedBase,
    owner_constraints,
)


class StorageDisk(StrEnum):
    """Where a media file's bytes are stored."""

    LOCAL = "local"
    S3 = "s3"
    GCS = "gcs"


class Media(TimestampedBase):
    """Metadata of an uploaded file.

    Upload transport is handled elsewhere; this row records where the file
    lives so it can be attached to owners.
    """

    __tablename__ = "media"
    __table_args__ = (CheckConstraint("size > 0", name="size_positive"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Display name")
    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Stored file name (with extension)",
    )
    mime_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="MIME type (e.g., 'image/png')",
    )
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="File size in bytes")
    disk: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StorageDisk.LOCAL.value,
        comment="local | s3 | gcs",
    )
    path: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Object key or relative path on the disk",
    )

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def __repr__(self) -> str:
        """Return media summary for debugging."""
        return f"<Media(id={self.id}, file_name={self.file_name!r}, disk={self.disk})>"


class Mediable(TimestampedBase, AssociationMixin):
    """Link between a media file and an owner, grouped into collections.

    ``group`` names the collection (e.g. "gallery", "cover") and
    ``sort_order`` the position inside it.
    """

    __tablename__ = "mediables"
    __table_args__ = owner_constraints("mediables", "media_id")
    __attachable_kind__ = AttachableKind.MEDIA
    __attachable_column__ = "media_id"

    media_id: Mapped[int] = mapped_column(
        ForeignKey("media.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Attached media file",
    )

    def __repr__(self) -> str:
        return (
            f"<Mediable(media_id={self.media_id}, owner={self.owner_type}:{self.owner_id}, "
            f"group={self.group!r}, sort_order={self.sort_order})>"
        )
