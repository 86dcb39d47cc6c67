"""Owner and attachable kinds for polymorphic associations.

Association rows reference their owner by ``(owner_type, owner_id)`` with no
foreign key, so the set of owner kinds is closed here and checked in one
place before any row is written.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from content_service.core.database.exceptions import (
    InvalidAttachableKindError,
    InvalidOwnerTypeError,
)

DEFAULT_GROUP = "default"


class OwnerType(StrEnum):
    """Entities that can own attachments."""

    POST = "post"
    USER = "user"
    MEDIA = "media"
    CATEGORY = "category"
    COMMENT = "comment"


class AttachableKind(StrEnum):
    """Resources attached through an association partition."""

    TAG = "tag"
    MEDIA = "media"
    CONTENT = "content"


# Owner kinds accepted by each partition
ALLOWED_OWNERS: dict[AttachableKind, frozenset[OwnerType]] = {
    AttachableKind.TAG: frozenset(
        {OwnerType.POST, OwnerType.USER, OwnerType.MEDIA, OwnerType.CATEGORY, OwnerType.COMMENT}
    ),
    AttachableKind.MEDIA: frozenset(
        {OwnerType.POST, OwnerType.USER, OwnerType.CATEGORY, OwnerType.COMMENT}
    ),
    AttachableKind.CONTENT: frozenset(
        {OwnerType.POST, OwnerType.USER, OwnerType.MEDIA, OwnerType.CATEGORY, OwnerType.COMMENT}
    ),
}


def validate_attachable_kind(kind: Any) -> AttachableKind:
    """Coerce ``kind`` to a registered AttachableKind.

    Raises:
        InvalidAttachableKindError: If the kind is not registered
    """
    if isinstance(kind, AttachableKind):
        return kind
    try:
        return AttachableKind(str(kind).strip().lower())
    except ValueError:
        raise InvalidAttachableKindError(kind) from None


def validate_owner_type(owner_type: Any, kind: Any) -> OwnerType:
    """Coerce ``owner_type`` and check it against the partition's allow-list.

    Input is trimmed and lower-cased first, so ``" Post "`` is accepted as
    ``post``.

    Args:
        owner_type: Owner kind supplied by the caller
        kind: Attachable kind of the partition being written

    Returns:
        The validated OwnerType

    Raises:
        InvalidAttachableKindError: If ``kind`` is not registered
        InvalidOwnerTypeError: If the owner kind is unknown or not allowed
    """
    partition = validate_attachable_kind(kind)
    allowed = ALLOWED_OWNERS[partition]
    try:
        owner = (
            owner_type
            if isinstance(owner_type, OwnerType)
            else OwnerType(str(owner_type).strip().lower())
        )
    except ValueError:
        raise InvalidOwnerTypeError(owner_type, partition.value, _names(allowed)) from None
    if owner not in allowed:
        raise InvalidOwnerTypeError(owner_type, partition.value, _names(allowed))
    return owner


def normalize_group(group: str | None) -> str:
    """Trim and lower-case a group name; empty means the default group."""
    if group is None:
        return DEFAULT_GROUP
    cleaned = group.strip().lower()
    return cleaned or DEFAULT_GROUP


def _names(owners: frozenset[OwnerType]) -> tuple[str, ...]:
    return tuple(sorted(owner.value for owner in owners))


__all__ = [
    "ALLOWED_OWNERS",
    "DEFAULT_GROUP",
    "AttachableKind",
    "OwnerType",
    "normalize_group",
    "validate_attachable_kind",
    "validate_owner_type",
]
