"""Core database package: base classes, repositories and tree/association support.

Base Classes and Mixins:
    - Base: Declarative base with naming convention and auto table naming
    - IntegerPKMixin, UUIDPKMixin: Primary key strategies
    - TimestampMixin: created_at, updated_at tracking
    - NestedSetMixin: Interval columns and tree navigation
    - OwnedMixin, AssociationMixin: Polymorphic owner reference

Convenience Bases:
    - TimestampedBase: Integer PK + timestamps
    - UUIDTimestampedBase: UUID PK + timestamps

Repository:
    - BaseRepository[T]: Generic CRUD with explicit session passing
    - NestedSetRepository[T]: Locked, savepoint-wrapped tree mutations
    - OwnedRepository[T], PolymorphicAssociationRepository[T]:
      owner-scoped listing, idempotent attach/detach

Exceptions:
    - RepositoryError: Base for every error below
    - NotFoundError, InvalidParentError, CircularReferenceError,
      HasChildrenError, ConcurrentModificationError, TreeIntegrityError,
      InvalidOwnerTypeError, InvalidAttachableKindError

Example:
    from content_service.core.database import NestedSetRepository

    repo = NestedSetRepository(Category)
    async with session.begin():
        root = await repo.insert_node(session, Category(name="News"))
        child = await repo.insert_node(session, Category(name="World"), root.id)
"""

from __future__ import annotations

from .association import (
    DEFAULT_GROUP,
    AssociationMixin,
    AttachableKind,
    OwnedMixin,
    OwnedRepository,
    OwnerType,
    PolymorphicAssociationRepository,
    owner_constraints,
)
from .base import (
    NAMING_CONVENTION,
    Base,
    IntegerPKMixin,
    TimestampedBase,
    TimestampMixin,
    UUIDPKMixin,
    UUIDTimestampedBase,
)
from .exceptions import (
    CircularReferenceError,
    ConcurrentModificationError,
    HasChildrenError,
    InvalidAttachableKindError,
    InvalidOwnerTypeError,
    InvalidParentError,
    NotFoundError,
    RepositoryError,
    TreeIntegrityError,
)
from .hierarchy import (
    ForestLock,
    IntervalTree,
    NestedSetMixin,
    NestedSetRepository,
    NodeBounds,
    nested_set_constraints,
)
from .repository import BaseRepository, dialect_insert

__all__ = [
    "DEFAULT_GROUP",
    "NAMING_CONVENTION",
    "AssociationMixin",
    "AttachableKind",
    "Base",
    "BaseRepository",
    "CircularReferenceError",
    "ConcurrentModificationError",
    "ForestLock",
    "HasChildrenError",
    "IntegerPKMixin",
    "IntervalTree",
    "InvalidAttachableKindError",
    "InvalidOwnerTypeError",
    "InvalidParentError",
    "NestedSetMixin",
    "NestedSetRepository",
    "NodeBounds",
    "NotFoundError",
    "OwnedMixin",
    "OwnedRepository",
    "OwnerType",
    "PolymorphicAssociationRepository",
    "RepositoryError",
    "TimestampMixin",
    "TimestampedBase",
    "TreeIntegrityError",
    "UUIDPKMixin",
    "UUIDTimestampedBase",
    "dialect_insert",
    "nested_set_constraints",
    "owner_constraints",
]
