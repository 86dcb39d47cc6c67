"""Nested-set hierarchy support.

- ``nested_set``: storage-free interval arithmetic (IntervalTree)
- ``mixins``: structural columns and read-only navigation (NestedSetMixin)
- ``locking``: per-forest exclusive section (ForestLock)
- ``repository``: savepoint-wrapped insert/move/delete (NestedSetRepository)
"""

from __future__ import annotations

from .locking import ForestLock, NestedSetForest
from .mixins import NestedSetMixin, nested_set_constraints
from .nested_set import IntervalTree, NodeBounds, Renumbering, Slot
from .repository import NestedSetRepository

__all__ = [
    "ForestLock",
    "IntervalTree",
    "NestedSetForest",
    "NestedSetMixin",
    "NestedSetRepository",
    "NodeBounds",
    "Renumbering",
    "Slot",
    "nested_set_constraints",
]
