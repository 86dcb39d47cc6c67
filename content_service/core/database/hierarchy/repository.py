"""Repository maintaining nested-set forests.

Each structural operation runs one read-recompute-write cycle:

1. open a savepoint (``session.begin_nested()``);
2. take the forest lock (see ``locking.ForestLock``);
3. load the whole forest with fresh values and build an IntervalTree;
4. apply the operation in memory;
5. write the resulting Renumbering as one batch and advance the
   forest version.

Any error before the savepoint is released rolls every bound back, so a
failed insert, move or delete never leaves a partially renumbered forest.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from content_service.core.database.exceptions import (
    CircularReferenceError,
    ConcurrentModificationError,
)
from content_service.core.database.hierarchy.locking import ForestLock
from content_service.core.database.hierarchy.nested_set import IntervalTree
from content_service.core.database.repository import BaseRepository

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.database.hierarchy.mixins import NestedSetMixin
    from content_service.core.database.hierarchy.nested_set import Renumbering


T = TypeVar("T", bound="NestedSetMixin")


class NestedSetRepository(BaseRepository[T]):
    """Repository for models using NestedSetMixin.

    Inherits from BaseRepository:
        - get, get_or_raise, get_by, create, delete_many

    Structural methods:
        - insert_node(session, node, parent_id) -> T
        - move_node(session, node_id, new_parent_id) -> T
        - delete_node(session, node_id, cascade) -> int
        - rebuild(session) -> int

    Read methods:
        - get_tree, get_roots, get_parent, get_children, get_ancestors,
          get_descendants, get_siblings, check_integrity

    Args:
        model: Model class using NestedSetMixin
        lock_timeout_ms: Forest lock wait bound on PostgreSQL
    """

    __slots__ = ("_forest_lock",)

    def __init__(self, model: type[T], *, lock_timeout_ms: int | None = None) -> None:
        super().__init__(model)
        self._forest_lock = ForestLock(
            model.__tablename__,  # type: ignore[attr-defined]
            timeout_ms=lock_timeout_ms,
        )

    @property
    def forest(self) -> str:
        """Forest key guarded by this repository."""
        return self._forest_lock.forest

    # ------------------------------------------------------------------
    # Structural operations
    # ------------------------------------------------------------------

    async def insert_node(
        self,
        session: AsyncSession,
        node: T,
        parent_id: Any = None,
    ) -> T:
        """Persist ``node`` as the last child of ``parent_id``.

        A None parent appends a new root after every existing root.

        Args:
            session: Database session
            node: New, transient instance (its structural columns are
                overwritten)
            parent_id: Parent node id or None

        Returns:
            The persisted node with id and bounds populated

        Raises:
            CircularReferenceError: If the node's own id is given as parent
            InvalidParentError: If the parent is not in the forest
            ConcurrentModificationError: If the forest is busy or changed
        """
        node_id = getattr(node, "id", None)
        if parent_id is not None and node_id is not None and parent_id == node_id:
            raise CircularReferenceError(self.model.__name__, node_id, parent_id)

        async with session.begin_nested():
            async with self._forest_lock.hold(session):
                tree, instances = await self._load_forest(session)
                slot = tree.slot_for(parent_id)

                # Flush with provisional bounds so the id is known, then
                # renumber the rest of the forest around it.
                node.parent_id = parent_id
                node.left, node.right = slot.left, slot.right
                node.depth, node.ordering = slot.depth, slot.ordering
                session.add(node)
                await self._flush(session)

                change = tree.insert(parent_id, node.id)
                await self._apply(session, change, instances)

        await session.refresh(node)
        self._logger.info(
            "Tree node inserted",
            extra={
                "entity": self.model.__name__,
                "id": str(node.id),
                "parent_id": str(parent_id) if parent_id is not None else None,
                "renumbered": len(change.updated),
                "operation": "tree.insert",
            },
        )
        return node

    async def move_node(
        self,
        session: AsyncSession,
        node_id: Any,
        new_parent_id: Any = None,
    ) -> T:
        """Re-parent a node with its subtree.

        Args:
            session: Database session
            node_id: Node to move
            new_parent_id: New parent id, None to make it a root

        Returns:
            The moved node with refreshed bounds

        Raises:
            NotFoundError: If the node is not in the forest
            InvalidParentError: If the new parent is not in the forest
            CircularReferenceError: If the new parent is the node or one
                of its descendants
            ConcurrentModificationError: If the forest is busy or changed
        """
        if new_parent_id is not None and new_parent_id == node_id:
            raise CircularReferenceError(self.model.__name__, node_id, new_parent_id)

        async with session.begin_nested():
            async with self._forest_lock.hold(session):
                tree, instances = await self._load_forest(session)
                change = tree.move(node_id, new_parent_id)
                await self._apply(session, change, instances)

        node = instances[node_id]
        self._logger.info(
            "Tree node moved",
            extra={
                "entity": self.model.__name__,
                "id": str(node_id),
                "parent_id": str(new_parent_id) if new_parent_id is not None else None,
                "renumbered": len(change.updated),
                "operation": "tree.move",
            },
        )
        return node

    async def delete_node(
        self,
        session: AsyncSession,
        node_id: Any,
        *,
        cascade: bool = False,
    ) -> int:
        """Delete a node, and its subtree when ``cascade`` is set.

        Args:
            session: Database session
            node_id: Node to delete
            cascade: Remove descendants too instead of refusing

        Returns:
            Number of rows removed (descendants + 1)

        Raises:
            NotFoundError: If the node is not in the forest
            HasChildrenError: If the node has descendants and cascade is False
            ConcurrentModificationError: If the forest is busy or changed
        """
        async with session.begin_nested():
            async with self._forest_lock.hold(session):
                tree, instances = await self._load_forest(session)
                change = tree.delete(node_id, cascade=cascade)
                await self._apply(session, change, instances)

        self._logger.info(
            "Tree node deleted",
            extra={
                "entity": self.model.__name__,
                "id": str(node_id),
                "removed": len(change.removed),
                "renumbered": len(change.updated),
                "operation": "tree.delete",
            },
        )
        return len(change.removed)

    async def rebuild(self, session: AsyncSession) -> int:
        """Recompute every interval from the ``parent_id`` links.

        Returns:
            Number of nodes whose structural columns changed

        Raises:
            InvalidParentError: If a node references a missing parent
            CircularReferenceError: If parent links form a cycle
            ConcurrentModificationError: If the forest is busy or changed
        """
        async with session.begin_nested():
            async with self._forest_lock.hold(session):
                tree, instances = await self._load_forest(session)
                change = tree.rebuild()
                await self._apply(session, change, instances)

        self._logger.info(
            "Tree rebuilt",
            extra={
                "entity": self.model.__name__,
                "nodes": len(instances),
                "renumbered": len(change.updated),
                "operation": "tree.rebuild",
            },
        )
        return len(change.updated)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_tree(self, session: AsyncSession) -> Sequence[T]:
        """Whole forest in pre-order (sorted by left bound)."""
        result = await session.execute(select(self.model).order_by(self.model.left))
        items = result.scalars().all()
        self._lazy.debug(lambda: f"tree.get_tree: {self.model.__name__} -> {len(items)} nodes")
        return items

    async def get_roots(self, session: AsyncSession) -> Sequence[T]:
        """Root nodes ordered by sibling position."""
        return await self.model.get_roots(session)

    async def get_parent(self, session: AsyncSession, node_id: Any) -> T | None:
        """Parent of ``node_id``, or None for a root.

        Raises:
            NotFoundError: If the node does not exist
        """
        node = await self.get_or_raise(session, node_id)
        if node.parent_id is None:
            return None
        return await self.get(session, node.parent_id)

    async def get_children(self, session: AsyncSession, node_id: Any) -> Sequence[T]:
        """Direct children of ``node_id``.

        Raises:
            NotFoundError: If the node does not exist
        """
        node = await self.get_or_raise(session, node_id)
        return await node.get_children(session)

    async def get_ancestors(
        self,
        session: AsyncSession,
        node_id: Any,
        *,
        include_self: bool = False,
    ) -> Sequence[T]:
        """Ancestors of ``node_id``, root first.

        Raises:
            NotFoundError: If the node does not exist
        """
        node = await self.get_or_raise(session, node_id)
        return await node.get_ancestors(session, include_self=include_self)

    async def get_descendants(
        self,
        session: AsyncSession,
        node_id: Any,
        *,
        include_self: bool = False,
        max_depth: int | None = None,
    ) -> Sequence[T]:
        """Descendants of ``node_id`` in pre-order.

        Raises:
            NotFoundError: If the node does not exist
        """
        node = await self.get_or_raise(session, node_id)
        return await node.get_descendants(session, include_self=include_self, max_depth=max_depth)

    async def get_siblings(
        self,
        session: AsyncSession,
        node_id: Any,
        *,
        include_self: bool = False,
    ) -> Sequence[T]:
        """Siblings of ``node_id`` ordered by (ordering, id).

        Raises:
            NotFoundError: If the node does not exist
        """
        node = await self.get_or_raise(session, node_id)
        return await node.get_siblings(session, include_self=include_self)

    async def check_integrity(self, session: AsyncSession) -> int:
        """Verify the stored forest against every nested-set invariant.

        Returns:
            Number of nodes checked

        Raises:
            TreeIntegrityError: Describing the first violation found
        """
        tree, _ = await self._load_forest(session)
        tree.check_integrity()
        return len(tree)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_forest(self, session: AsyncSession) -> tuple[IntervalTree, dict[Any, T]]:
        # populate_existing would discard unflushed edits on loaded rows
        await self._flush(session)
        stmt = (
            select(self.model)
            .order_by(self.model.left)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        instances = {item.id: item for item in result.scalars().all()}  # type: ignore[attr-defined]
        tree = IntervalTree(
            (item.to_bounds() for item in instances.values()),
            model_name=self.model.__name__,
        )
        self._lazy.debug(lambda: f"tree.load: {self.model.__name__} -> {len(instances)} nodes")
        return tree, instances

    async def _apply(
        self,
        session: AsyncSession,
        change: Renumbering,
        instances: dict[Any, T],
    ) -> None:
        if change.removed:
            await self.delete_many(session, change.removed)
        for node_id, bounds in change.updated.items():
            instances[node_id].apply_bounds(bounds)
        await self._flush(session)
        self._lazy.debug(
            lambda: f"tree.apply: {self.model.__name__} updated={len(change.updated)} removed={len(change.removed)}"
        )

    async def _flush(self, session: AsyncSession) -> None:
        try:
            await session.flush()
        except OperationalError as exc:
            raise ConcurrentModificationError(self.forest, "write blocked by another transaction") from exc


__all__ = [
    "NestedSetRepository",
]
