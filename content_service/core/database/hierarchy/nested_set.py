"""Nested-set (interval) arithmetic for hierarchical tables.

Every node of a forest carries a ``[left, right]`` interval; a node's
descendants are exactly the nodes whose intervals lie strictly inside its
own. That turns ancestor, descendant and cycle checks into integer
comparisons, at the cost of renumbering part of the forest on each
structural change.

This module is storage-free. ``IntervalTree`` is built from a snapshot of
one forest, mutated in memory, and every structural operation reports a
``Renumbering`` that the repository layer persists in a single savepoint.

Example:
    >>> tree = IntervalTree([NodeBounds(1, None, 1, 2)])
    >>> change = tree.insert(parent_id=1, node_id=2)
    >>> change.created
    NodeBounds(id=2, parent_id=1, left=2, right=3, depth=1, ordering=1)
    >>> tree.get(1).right
    4
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import astuple, dataclass, field, replace
from typing import TYPE_CHECKING, Any

from content_service.core.database.exceptions import (
    CircularReferenceError,
    HasChildrenError,
    InvalidParentError,
    NotFoundError,
    RepositoryError,
    TreeIntegrityError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable


@dataclass(slots=True)
class NodeBounds:
    """Structural columns of one node.

    Attributes:
        id: Stable node identifier
        parent_id: Parent node id, None for roots
        left: Left interval bound
        right: Right interval bound
        depth: Number of strict ancestors
        ordering: Position among siblings (append order)
    """

    id: Hashable
    parent_id: Hashable | None
    left: int
    right: int
    depth: int = 0
    ordering: int = 0

    @property
    def width(self) -> int:
        """Number of interval slots used by this node and its subtree."""
        return self.right - self.left + 1

    @property
    def descendant_count(self) -> int:
        """Number of descendants implied by the interval width."""
        return (self.right - self.left - 1) // 2

    def contains(self, other: NodeBounds) -> bool:
        """Whether ``other`` lies strictly inside this interval."""
        return self.left < other.left and other.right < self.right


@dataclass(slots=True)
class Slot:
    """Position a new node would take without mutating the tree."""

    parent_id: Hashable | None
    left: int
    depth: int
    ordering: int

    @property
    def right(self) -> int:
        return self.left + 1


@dataclass(slots=True)
class Renumbering:
    """Batch of changes produced by one structural operation.

    Attributes:
        created: Bounds of the inserted node (insert only)
        updated: Final bounds of every pre-existing node whose structural
            columns changed, keyed by id
        removed: Ids deleted by the operation, in pre-order
    """

    created: NodeBounds | None = None
    updated: dict[Any, NodeBounds] = field(default_factory=dict)
    removed: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.created is None and not self.updated and not self.removed


def _sibling_key(node: NodeBounds) -> tuple[int, Any]:
    return (node.ordering, node.id)


class IntervalTree:
    """In-memory nested-set forest.

    Args:
        nodes: Snapshot of the forest's structural columns. Records are
            copied, so the caller's objects are never mutated.
        model_name: Label used in error messages
    """

    def __init__(self, nodes: Iterable[NodeBounds] = (), *, model_name: str = "Node") -> None:
        self.model_name = model_name
        self._nodes: dict[Any, NodeBounds] = {}
        for node in nodes:
            self._nodes[node.id] = replace(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get(self, node_id: Hashable) -> NodeBounds:
        """Return the bounds of ``node_id``.

        Raises:
            NotFoundError: If the node is not part of the forest
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(self.model_name, {"id": node_id})
        return node

    def nodes(self) -> list[NodeBounds]:
        """All nodes in pre-order (sorted by left bound)."""
        return sorted(self._nodes.values(), key=lambda n: n.left)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def ancestors(self, node_id: Hashable, *, include_self: bool = False) -> list[NodeBounds]:
        """Ancestors of a node, root first."""
        node = self.get(node_id)
        found = [n for n in self._nodes.values() if n.contains(node)]
        if include_self:
            found.append(node)
        return sorted(found, key=lambda n: n.left)

    def descendants(
        self,
        node_id: Hashable,
        *,
        include_self: bool = False,
        max_depth: int | None = None,
    ) -> list[NodeBounds]:
        """Descendants of a node in pre-order.

        Args:
            node_id: Subtree root
            include_self: Include the subtree root first
            max_depth: Limit relative to the subtree root (1 = children only)
        """
        node = self.get(node_id)
        found = [
            n
            for n in self._nodes.values()
            if node.contains(n) and (max_depth is None or n.depth - node.depth <= max_depth)
        ]
        if include_self:
            found.append(node)
        return sorted(found, key=lambda n: n.left)

    def children(self, parent_id: Hashable | None) -> list[NodeBounds]:
        """Direct children of ``parent_id`` (roots when None), sibling order."""
        if parent_id is not None:
            self.get(parent_id)
        return sorted(
            (n for n in self._nodes.values() if n.parent_id == parent_id),
            key=_sibling_key,
        )

    def roots(self) -> list[NodeBounds]:
        return self.children(None)

    def siblings(self, node_id: Hashable, *, include_self: bool = False) -> list[NodeBounds]:
        """Nodes sharing the node's parent, ordered by (ordering, id)."""
        node = self.get(node_id)
        return [
            n for n in self.children(node.parent_id) if include_self or n.id != node.id
        ]

    def is_ancestor(self, ancestor_id: Hashable, node_id: Hashable) -> bool:
        return self.get(ancestor_id).contains(self.get(node_id))

    # ------------------------------------------------------------------
    # Structural operations
    # ------------------------------------------------------------------

    def slot_for(self, parent_id: Hashable | None) -> Slot:
        """Compute where a new last child of ``parent_id`` would go.

        Raises:
            InvalidParentError: If the parent is not part of the forest
        """
        if parent_id is None:
            return Slot(None, self._max_right() + 1, 0, self._next_ordering(None))
        parent = self._nodes.get(parent_id)
        if parent is None:
            raise InvalidParentError(self.model_name, parent_id)
        return Slot(parent_id, parent.right, parent.depth + 1, self._next_ordering(parent_id))

    def insert(self, parent_id: Hashable | None, node_id: Hashable) -> Renumbering:
        """Insert ``node_id`` as the last child of ``parent_id``.

        A None parent appends a new root after every existing root.

        Raises:
            InvalidParentError: If the parent is not part of the forest
            RepositoryError: If ``node_id`` is already present
        """
        if node_id in self._nodes:
            raise RepositoryError(
                f"{self.model_name} is already part of the tree",
                details={"id": node_id},
            )
        if parent_id is not None and parent_id == node_id:
            raise CircularReferenceError(self.model_name, node_id, parent_id)

        slot = self.slot_for(parent_id)
        before = self._snapshot()
        self._shift(lambda bound: bound >= slot.left, 2)

        node = NodeBounds(
            id=node_id,
            parent_id=parent_id,
            left=slot.left,
            right=slot.right,
            depth=slot.depth,
            ordering=slot.ordering,
        )
        self._nodes[node_id] = node
        return Renumbering(created=replace(node), updated=self._changes_since(before))

    def move(self, node_id: Hashable, new_parent_id: Hashable | None) -> Renumbering:
        """Re-parent a node together with its subtree.

        The subtree keeps its internal shape; the moved node becomes the
        last child of its new parent (or the last root).

        Raises:
            NotFoundError: If the node is not part of the forest
            InvalidParentError: If the new parent is not part of the forest
            CircularReferenceError: If the new parent is the node itself
                or one of its descendants
        """
        node = self.get(node_id)
        if new_parent_id is not None:
            if new_parent_id == node_id:
                raise CircularReferenceError(self.model_name, node_id, new_parent_id)
            target = self._nodes.get(new_parent_id)
            if target is None:
                raise InvalidParentError(self.model_name, new_parent_id)
            if node.contains(target):
                raise CircularReferenceError(self.model_name, node_id, new_parent_id)

        before = self._snapshot()
        old_left, old_right, width = node.left, node.right, node.width
        subtree = {n.id for n in self._nodes.values() if old_left <= n.left and n.right <= old_right}
        outside = [n for n in self._nodes.values() if n.id not in subtree]

        # Close the gap left by the subtree.
        self._shift(lambda bound: bound > old_right, -width, outside)

        if new_parent_id is None:
            point = max((n.right for n in outside), default=0) + 1
            new_depth = 0
        else:
            target = self._nodes[new_parent_id]
            point = target.right
            new_depth = target.depth + 1

        # Open a gap of the same width at the insertion point.
        self._shift(lambda bound: bound >= point, width, outside)

        offset = point - old_left
        depth_delta = new_depth - node.depth
        for member_id in subtree:
            member = self._nodes[member_id]
            member.left += offset
            member.right += offset
            member.depth += depth_delta

        node.ordering = self._next_ordering(new_parent_id, exclude=node_id)
        node.parent_id = new_parent_id
        return Renumbering(updated=self._changes_since(before))

    def delete(self, node_id: Hashable, *, cascade: bool = False) -> Renumbering:
        """Remove a node and, with ``cascade``, its whole subtree.

        Raises:
            NotFoundError: If the node is not part of the forest
            HasChildrenError: If the node has descendants and cascade is False
        """
        node = self.get(node_id)
        if node.descendant_count and not cascade:
            raise HasChildrenError(self.model_name, node_id, node.descendant_count)

        left, right, width = node.left, node.right, node.width
        removed = [n for n in self._nodes.values() if left <= n.left and n.right <= right]
        removed.sort(key=lambda n: n.left)
        for member in removed:
            del self._nodes[member.id]

        before = self._snapshot()
        self._shift(lambda bound: bound > right, -width)
        return Renumbering(updated=self._changes_since(before), removed=[n.id for n in removed])

    def rebuild(self) -> Renumbering:
        """Recompute intervals, depth and ordering from ``parent_id`` links.

        Children are visited in their current (ordering, id) order and
        their ordering is normalised to 1..k.

        Raises:
            InvalidParentError: If a node references a missing parent
            CircularReferenceError: If parent links form a cycle
        """
        children: dict[Any, list[NodeBounds]] = defaultdict(list)
        for node in self._nodes.values():
            if node.parent_id is not None and node.parent_id not in self._nodes:
                raise InvalidParentError(self.model_name, node.parent_id)
            children[node.parent_id].append(node)
        for group in children.values():
            group.sort(key=_sibling_key)

        unreachable = self._first_unreachable(children)
        if unreachable is not None:
            raise CircularReferenceError(self.model_name, unreachable.id, unreachable.parent_id)

        before = self._snapshot()
        counter = 1
        # Iterative pre-order walk; frames hold (node, remaining children).
        for position, root in enumerate(children[None], start=1):
            root.ordering = position
            root.depth = 0
            root.left = counter
            counter += 1
            stack = [(root, iter(children[root.id]))]
            position_by_parent: dict[Any, int] = {root.id: 0}
            while stack:
                current, pending = stack[-1]
                child = next(pending, None)
                if child is None:
                    current.right = counter
                    counter += 1
                    stack.pop()
                    continue
                position_by_parent[current.id] += 1
                child.ordering = position_by_parent[current.id]
                child.depth = current.depth + 1
                child.left = counter
                counter += 1
                position_by_parent[child.id] = 0
                stack.append((child, iter(children[child.id])))

        return Renumbering(updated=self._changes_since(before))

    def check_integrity(self) -> None:
        """Verify every nested-set invariant.

        Checks dense numbering (bounds are exactly 1..2n), width against
        descendant count, proper nesting, parent links matching the
        enclosing interval and depth matching the number of ancestors.

        Raises:
            TreeIntegrityError: Describing the first violation found
        """
        ordered = self.nodes()
        bounds = sorted(b for n in ordered for b in (n.left, n.right))
        if bounds != list(range(1, 2 * len(ordered) + 1)):
            raise TreeIntegrityError(self.model_name, "bounds are not a dense 1..2n sequence")

        stack: list[NodeBounds] = []
        for node in ordered:
            if node.left >= node.right:
                raise TreeIntegrityError(self.model_name, "left bound must be below right", node.id)
            while stack and stack[-1].right < node.left:
                stack.pop()
            enclosing = stack[-1] if stack else None
            if enclosing is not None and node.right > enclosing.right:
                raise TreeIntegrityError(self.model_name, "intervals partially overlap", node.id)
            expected_parent = enclosing.id if enclosing is not None else None
            if node.parent_id != expected_parent:
                raise TreeIntegrityError(
                    self.model_name, "parent_id does not match enclosing interval", node.id
                )
            if node.depth != len(stack):
                raise TreeIntegrityError(self.model_name, "depth does not match ancestors", node.id)
            stack.append(node)

        for node in ordered:
            inside = sum(1 for other in ordered if node.contains(other))
            if node.right != node.left + 2 * inside + 1:
                raise TreeIntegrityError(
                    self.model_name, "width does not match descendant count", node.id
                )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _max_right(self) -> int:
        return max((n.right for n in self._nodes.values()), default=0)

    def _next_ordering(self, parent_id: Hashable | None, *, exclude: Hashable | None = None) -> int:
        orderings = [
            n.ordering
            for n in self._nodes.values()
            if n.parent_id == parent_id and n.id != exclude
        ]
        return max(orderings, default=0) + 1

    def _shift(
        self,
        predicate: Callable[[int], bool],
        delta: int,
        nodes: Iterable[NodeBounds] | None = None,
    ) -> None:
        for node in self._nodes.values() if nodes is None else nodes:
            if predicate(node.left):
                node.left += delta
            if predicate(node.right):
                node.right += delta

    def _snapshot(self) -> dict[Any, tuple[Any, ...]]:
        return {node_id: astuple(node) for node_id, node in self._nodes.items()}

    def _changes_since(self, before: dict[Any, tuple[Any, ...]]) -> dict[Any, NodeBounds]:
        return {
            node_id: replace(node)
            for node_id, node in self._nodes.items()
            if node_id in before and before[node_id] != astuple(node)
        }

    def _first_unreachable(self, children: dict[Any, list[NodeBounds]]) -> NodeBounds | None:
        """First node not reachable from a root, i.e. caught in a parent cycle."""
        reachable: set[Any] = set()
        frontier = [n.id for n in children.get(None, [])]
        while frontier:
            current = frontier.pop()
            reachable.add(current)
            frontier.extend(child.id for child in children.get(current, []))
        return next((n for n in self._nodes.values() if n.id not in reachable), None)


__all__ = [
    "IntervalTree",
    "NodeBounds",
    "Renumbering",
    "Slot",
]
