"""Repositories for owner-scoped rows and polymorphic associations.

Every write validates the owner type against the partition's allow-list
before touching the database (see ``kinds.validate_owner_type``).
Attach is a single ``INSERT ... ON CONFLICT`` on the association's unique
key, so two concurrent attaches of the same key create one row.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar, cast

from sqlalchemy import delete, func, select, update

from content_service.core.database.association.kinds import (
    normalize_group,
    validate_attachable_kind,
    validate_owner_type,
)
from content_service.core.database.repository import BaseRepository, dialect_insert

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

    from content_service.core.database.association.kinds import AttachableKind, OwnerType
    from content_service.core.database.association.mixins import AssociationMixin, OwnedMixin


T = TypeVar("T", bound="OwnedMixin")
A = TypeVar("A", bound="AssociationMixin")


class OwnedRepository(BaseRepository[T]):
    """Repository for rows scoped to a polymorphic owner.

    Provides:
        - list_by_owner(session, owner_type, owner_id, group) -> Sequence[T]
        - count_by_owner(session, owner_type, owner_id) -> int
        - detach_all(session, owner_type, owner_id) -> int
        - reorder(session, owner_type, owner_id, keys, group) -> int
        - next_sort_order(session, owner_type, owner_id, group) -> int
    """

    __slots__ = ("kind",)

    def __init__(self, model: type[T]) -> None:
        super().__init__(model)
        self.kind: AttachableKind = validate_attachable_kind(model.__attachable_kind__)

    def validate_owner(self, owner_type: Any) -> OwnerType:
        """Validate ``owner_type`` for this repository's partition.

        Raises:
            InvalidOwnerTypeError: If the owner kind is not allowed
        """
        return validate_owner_type(owner_type, self.kind)

    async def list_by_owner(
        self,
        session: AsyncSession,
        owner_type: Any,
        owner_id: Any,
        *,
        group: str | None = None,
    ) -> Sequence[T]:
        """Rows of one owner ordered by sort_order, then creation order.

        Args:
            session: Database session
            owner_type: Owner kind
            owner_id: Owner id
            group: Restrict to one group (None lists every group)
        """
        owner = self.validate_owner(owner_type)
        stmt = select(self.model).where(
            self.model.owner_type == owner.value,
            self.model.owner_id == str(owner_id),
        )
        if group is not None:
            stmt = stmt.where(self.model.group == normalize_group(group))
        stmt = stmt.order_by(self.model.sort_order, self._pk_attr())

        result = await session.execute(stmt)
        items = result.scalars().all()
        self._lazy.debug(
            lambda: f"db.list_by_owner: {self.model.__name__}({owner.value}:{owner_id}, group={group!r}) -> {len(items)} items"
        )
        return items

    async def count_by_owner(self, session: AsyncSession, owner_type: Any, owner_id: Any) -> int:
        owner = self.validate_owner(owner_type)
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(
                self.model.owner_type == owner.value,
                self.model.owner_id == str(owner_id),
            )
        )
        return (await session.execute(stmt)).scalar_one()

    async def detach_all(self, session: AsyncSession, owner_type: Any, owner_id: Any) -> int:
        """Remove every row of an owner.

        Returns:
            Number of rows removed
        """
        owner = self.validate_owner(owner_type)
        stmt = delete(self.model).where(
            self.model.owner_type == owner.value,
            self.model.owner_id == str(owner_id),
        )
        result = await session.execute(stmt)
        removed: int = cast("Any", result).rowcount or 0
        self._logger.info(
            "Owner rows removed",
            extra={
                "entity": self.model.__name__,
                "owner_type": owner.value,
                "owner_id": str(owner_id),
                "removed": removed,
                "operation": "db.detach_all",
            },
        )
        return removed

    async def next_sort_order(
        self,
        session: AsyncSession,
        owner_type: OwnerType,
        owner_id: Any,
        group: str,
    ) -> int:
        """Append position within a group (0 for the first row)."""
        stmt = select(func.max(self.model.sort_order)).where(
            self.model.owner_type == owner_type.value,
            self.model.owner_id == str(owner_id),
            self.model.group == group,
        )
        current = (await session.execute(stmt)).scalar_one_or_none()
        return 0 if current is None else current + 1

    async def reorder(
        self,
        session: AsyncSession,
        owner_type: Any,
        owner_id: Any,
        keys: Sequence[Any],
        *,
        group: str | None = None,
    ) -> int:
        """Rewrite sort_order so rows follow ``keys`` (positions 0..n-1).

        Keys not belonging to the owner are ignored.

        Returns:
            Number of rows updated
        """
        owner = self.validate_owner(owner_type)
        key_attr = self._order_key()
        updated = 0
        for position, key in enumerate(keys):
            stmt = (
                update(self.model)
                .where(
                    self.model.owner_type == owner.value,
                    self.model.owner_id == str(owner_id),
                    key_attr == key,
                )
                .values(sort_order=position, updated_at=datetime.now(UTC))
                .execution_options(synchronize_session="fetch")
            )
            if group is not None:
                stmt = stmt.where(self.model.group == normalize_group(group))
            result = await session.execute(stmt)
            updated += cast("Any", result).rowcount or 0

        self._lazy.debug(
            lambda: f"db.reorder: {self.model.__name__}({owner.value}:{owner_id}) -> {updated} rows"
        )
        return updated

    def _order_key(self) -> InstrumentedAttribute[Any]:
        return self._pk_attr()


class PolymorphicAssociationRepository(OwnedRepository[A]):
    """Attach/detach resources to owners of several entity kinds.

    Provides, on top of OwnedRepository:
        - attach(session, owner_type, owner_id, attachable_id, group, sort_order) -> A
        - detach(session, owner_type, owner_id, attachable_id, group) -> bool
        - list_by_attachable(session, attachable_id) -> Sequence[A]
        - count_by_attachable(session, attachable_id) -> int
        - remove_attachable(session, attachable_id) -> int
    """

    __slots__ = ()

    async def attach(
        self,
        session: AsyncSession,
        owner_type: Any,
        owner_id: Any,
        attachable_id: Any,
        *,
        group: str | None = None,
        sort_order: int | None = None,
    ) -> A:
        """Link a resource to an owner, idempotently.

        A new link without ``sort_order`` is appended to its group. When
        the link already exists, a given ``sort_order`` updates it and
        otherwise the row is left untouched.

        Args:
            session: Database session
            owner_type: Owner kind (validated against the partition)
            owner_id: Owner id
            attachable_id: Resource id
            group: Display group; empty or None means "default"
            sort_order: Explicit position within the group

        Returns:
            The association row as stored

        Raises:
            InvalidOwnerTypeError: If the owner kind is not allowed
        """
        owner = self.validate_owner(owner_type)
        group_name = normalize_group(group)
        owner_key = str(owner_id)
        column = self.model.__attachable_column__
        now = datetime.now(UTC)

        position = sort_order
        if position is None:
            position = await self.next_sort_order(session, owner, owner_key, group_name)

        stmt = dialect_insert(session, self.model).values(
            {
                "owner_type": owner.value,
                "owner_id": owner_key,
                column: attachable_id,
                "group": group_name,
                "sort_order": position,
                "created_at": now,
                "updated_at": now,
            }
        )
        conflict_columns = ["owner_type", "owner_id", column, "group"]
        if sort_order is None:
            stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
        else:
            stmt = stmt.on_conflict_do_update(
                index_elements=conflict_columns,
                set_={"sort_order": stmt.excluded.sort_order, "updated_at": now},
            )
        await session.execute(stmt)

        row = await self._find(session, owner, owner_key, attachable_id, group_name)
        self._lazy.debug(
            lambda: f"db.attach: {self.model.__name__}({owner.value}:{owner_key} <- {column}={attachable_id}, group={group_name!r}, sort_order={row.sort_order})"
        )
        return row

    async def detach(
        self,
        session: AsyncSession,
        owner_type: Any,
        owner_id: Any,
        attachable_id: Any,
        *,
        group: str | None = None,
    ) -> bool:
        """Unlink a resource from an owner.

        Detaching a link that does not exist is a no-op.

        Args:
            group: Restrict to one group (None detaches from every group)

        Returns:
            True if a row was removed
        """
        owner = self.validate_owner(owner_type)
        stmt = delete(self.model).where(
            self.model.owner_type == owner.value,
            self.model.owner_id == str(owner_id),
            self.model.attachable_attr() == attachable_id,
        )
        if group is not None:
            stmt = stmt.where(self.model.group == normalize_group(group))
        result = await session.execute(stmt)
        removed: int = cast("Any", result).rowcount or 0

        self._lazy.debug(
            lambda: f"db.detach: {self.model.__name__}({owner.value}:{owner_id} -x- {attachable_id}) -> {removed} removed"
        )
        return removed > 0

    async def list_by_attachable(self, session: AsyncSession, attachable_id: Any) -> Sequence[A]:
        """Every owner link of one resource, in creation order."""
        stmt = (
            select(self.model)
            .where(self.model.attachable_attr() == attachable_id)
            .order_by(self._pk_attr())
        )
        result = await session.execute(stmt)
        items = result.scalars().all()
        self._lazy.debug(
            lambda: f"db.list_by_attachable: {self.model.__name__}({attachable_id}) -> {len(items)} items"
        )
        return items

    async def count_by_attachable(self, session: AsyncSession, attachable_id: Any) -> int:
        """Reference count of one resource."""
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.attachable_attr() == attachable_id)
        )
        return (await session.execute(stmt)).scalar_one()

    async def remove_attachable(self, session: AsyncSession, attachable_id: Any) -> int:
        """Remove every owner link of one resource.

        Returns:
            Number of rows removed
        """
        stmt = delete(self.model).where(self.model.attachable_attr() == attachable_id)
        result = await session.execute(stmt)
        removed: int = cast("Any", result).rowcount or 0
        self._logger.info(
            "Resource links removed",
            extra={
                "entity": self.model.__name__,
                "attachable_id": str(attachable_id),
                "removed": removed,
                "operation": "db.remove_attachable",
            },
        )
        return removed

    async def _find(
        self,
        session: AsyncSession,
        owner: OwnerType,
        owner_id: str,
        attachable_id: Any,
        group: str,
    ) -> A:
        stmt = (
            select(self.model)
            .where(
                self.model.owner_type == owner.value,
                self.model.owner_id == owner_id,
                self.model.attachable_attr() == attachable_id,
                self.model.group == group,
            )
            .execution_options(populate_existing=True)
        )
        return (await session.execute(stmt)).scalar_one()

    def _order_key(self) -> InstrumentedAttribute[Any]:
        return self.model.attachable_attr()


__all__ = [
    "OwnedRepository",
    "PolymorphicAssociationRepository",
]
