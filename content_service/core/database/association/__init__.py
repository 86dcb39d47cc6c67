"""Polymorphic association support.

Association tables link a resource (tag, media file) to an owner of one of
several entity kinds, identified by ``(owner_type, owner_id)``. Each table
is one partition bound to a single AttachableKind.
"""

from __future__ import annotations

from .kinds import (
    ALLOWED_OWNERS,
    DEFAULT_GROUP,
    AttachableKind,
    OwnerType,
    normalize_group,
    validate_attachable_kind,
    validate_owner_type,
)
from .mixins import AssociationMixin, OwnedMixin, owner_constraints
from .repository import OwnedRepository, PolymorphicAssociationRepository

__all__ = [
    "ALLOWED_OWNERS",
    "DEFAULT_GROUP",
    "AssociationMixin",
    "AttachableKind",
    "OwnedMixin",
    "OwnedRepository",
    "OwnerType",
    "PolymorphicAssociationRepository",
    "normalize_group",
    "owner_constraints",
    "validate_attachable_kind",
    "validate_owner_type",
]
