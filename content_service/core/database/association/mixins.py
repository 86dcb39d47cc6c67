"""Mixins for owner-scoped and polymorphic association tables.

OwnedMixin gives a row an ``(owner_type, owner_id)`` owner reference plus
a display group and sort position. AssociationMixin extends it for tables
that link an owner to a separately stored resource (a tag, a media file);
the resource column is declared by the model itself so it can carry its
own foreign key.

Example:
    class TaggedEntity(TimestampedBase, AssociationMixin):
        __tablename__ = "taggables"
        __attachable_kind__ = AttachableKind.TAG
        __attachable_column__ = "tag_id"
        __table_args__ = owner_constraints("taggables", "tag_id")

        tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, validates

from content_service.core.database.association.kinds import DEFAULT_GROUP, normalize_group

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute

    from content_service.core.database.association.kinds import AttachableKind


def owner_constraints(
    tablename: str,
    attachable_column: str | None = None,
) -> tuple[Any, ...]:
    """Table arguments for an owner-scoped table.

    Adds the owner listing index and, for association tables, the unique
    key that makes attach idempotent.

    Args:
        tablename: Table the arguments are built for
        attachable_column: Resource column of an association table
    """
    args: list[Any] = [
        Index(f"ix_{tablename}_owner", "owner_type", "owner_id", "group", "sort_order"),
    ]
    if attachable_column is not None:
        args.append(
            UniqueConstraint(
                "owner_type",
                "owner_id",
                attachable_column,
                "group",
                name=f"uq_{tablename}_owner_attachable",
            )
        )
    return tuple(args)


class OwnedMixin:
    """Owner reference, group and sort position for a row.

    ``owner_id`` is stored as text so integer and UUID owners share one
    column. Owner types and groups are normalised on assignment; the
    allow-list check lives in the repository.
    """

    __allow_unmapped__ = True

    # Partition the rows belong to; set on every concrete model
    __attachable_kind__: ClassVar[AttachableKind]

    owner_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Owner entity kind (post, user, media, category, comment)",
    )
    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Owner entity id",
    )
    group: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_GROUP,
        server_default=DEFAULT_GROUP,
        comment="Display group within the owner (e.g. 'gallery')",
    )
    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
        comment="Display order within the group",
    )

    @validates("owner_type")
    def _normalize_owner_type(self, key: str, value: Any) -> str:
        return str(value).strip().lower()

    @validates("owner_id")
    def _normalize_owner_id(self, key: str, value: Any) -> str:
        return str(value)

    @validates("group")
    def _normalize_group(self, key: str, value: str | None) -> str:
        return normalize_group(value)


class AssociationMixin(OwnedMixin):
    """Owner-to-resource link row.

    Concrete models declare the resource column and name it in
    ``__attachable_column__``.
    """

    __attachable_column__: ClassVar[str]

    @classmethod
    def attachable_attr(cls) -> InstrumentedAttribute[Any]:
        """Mapped attribute holding the attached resource id."""
        return getattr(cls, cls.__attachable_column__)

    @property
    def attachable_id(self) -> Any:
        return getattr(self, self.__attachable_column__)


__all__ = [
    "AssociationMixin",
    "OwnedMixin",
    "owner_constraints",
]
