"""Unit tests for the in-memory nested-set arithmetic."""

from __future__ import annotations

import random

import pytest

from content_service.core.database.exceptions import (
    CircularReferenceError,
    HasChildrenError,
    InvalidParentError,
    NotFoundError,
    RepositoryError,
    TreeIntegrityError,
)
from content_service.core.database.hierarchy.nested_set import IntervalTree, NodeBounds


def _bounds(tree: IntervalTree) -> dict[str, tuple[int, int, int]]:
    return {n.id: (n.left, n.right, n.depth) for n in tree.nodes()}


@pytest.fixture
def sample_tree() -> IntervalTree:
    """A(1,10) with B(2,5) holding B1 and C(6,9) holding C1."""
    tree = IntervalTree(model_name="Category")
    tree.insert(None, "A")
    tree.insert("A", "B")
    tree.insert("B", "B1")
    tree.insert("A", "C")
    tree.insert("C", "C1")
    return tree


class TestInsert:
    """Tests for IntervalTree.insert."""

    def test_first_root_gets_one_two(self):
        tree = IntervalTree()
        change = tree.insert(None, 1)

        assert change.created == NodeBounds(1, None, 1, 2, depth=0, ordering=1)
        assert change.updated == {}

    def test_second_root_is_appended(self):
        tree = IntervalTree()
        tree.insert(None, 1)
        tree.insert(None, 2)

        assert (tree.get(2).left, tree.get(2).right) == (3, 4)
        assert tree.get(2).ordering == 2

    def test_sample_tree_bounds(self, sample_tree: IntervalTree):
        """Building the sample forest yields the documented intervals."""
        assert _bounds(sample_tree) == {
            "A": (1, 10, 0),
            "B": (2, 5, 1),
            "B1": (3, 4, 2),
            "C": (6, 9, 1),
            "C1": (7, 8, 2),
        }

    def test_insert_under_root_appends_last_child(self, sample_tree: IntervalTree):
        change = sample_tree.insert("A", "D")

        assert (change.created.left, change.created.right, change.created.depth) == (10, 11, 1)
        assert sample_tree.get("A").right == 12
        assert set(change.updated) == {"A"}

    def test_insert_is_strictly_contained_in_parent(self, sample_tree: IntervalTree):
        sample_tree.insert("C1", "X")

        for ancestor in ("A", "C", "C1"):
            assert sample_tree.get(ancestor).contains(sample_tree.get("X"))

    def test_insert_shifts_later_nodes(self, sample_tree: IntervalTree):
        change = sample_tree.insert("B", "B2")

        assert (change.created.left, change.created.right) == (5, 6)
        assert _bounds(sample_tree)["C"] == (8, 11, 1)
        assert set(change.updated) == {"A", "B", "C", "C1"}

    def test_missing_parent_is_rejected(self, sample_tree: IntervalTree):
        before = _bounds(sample_tree)

        with pytest.raises(InvalidParentError):
            sample_tree.insert("nope", "X")

        assert _bounds(sample_tree) == before

    def test_duplicate_id_is_rejected(self, sample_tree: IntervalTree):
        with pytest.raises(RepositoryError):
            sample_tree.insert("A", "B")

    def test_self_parent_is_circular(self):
        tree = IntervalTree()

        with pytest.raises(CircularReferenceError):
            tree.insert(5, 5)


class TestMove:
    """Tests for IntervalTree.move."""

    def test_move_under_sibling(self, sample_tree: IntervalTree):
        """Moving B under C nests B in C and keeps A's width."""
        sample_tree.insert("A", "D")
        width_before = sample_tree.get("A").width

        sample_tree.move("B", "C")

        assert sample_tree.get("A").width == width_before
        assert sample_tree.get("C").contains(sample_tree.get("B"))
        assert sample_tree.get("B").depth == 2
        assert sample_tree.get("B1").depth == 3
        assert sample_tree.get("B").parent_id == "C"
        sample_tree.check_integrity()

    def test_moved_node_becomes_last_child(self, sample_tree: IntervalTree):
        sample_tree.move("B", "C")

        children = [n.id for n in sample_tree.children("C")]
        assert children == ["C1", "B"]

    def test_move_to_root_level(self, sample_tree: IntervalTree):
        sample_tree.move("C", None)

        assert sample_tree.get("C").depth == 0
        assert sample_tree.get("C1").depth == 1
        assert [n.id for n in sample_tree.roots()] == ["A", "C"]
        assert sample_tree.get("A").right == 6
        sample_tree.check_integrity()

    def test_move_under_own_descendant_fails_without_change(self, sample_tree: IntervalTree):
        before = _bounds(sample_tree)

        with pytest.raises(CircularReferenceError):
            sample_tree.move("A", "B1")

        assert _bounds(sample_tree) == before

    def test_move_under_self_fails(self, sample_tree: IntervalTree):
        with pytest.raises(CircularReferenceError):
            sample_tree.move("B", "B")

    def test_move_to_missing_parent(self, sample_tree: IntervalTree):
        with pytest.raises(InvalidParentError):
            sample_tree.move("B", "missing")

    def test_move_missing_node(self, sample_tree: IntervalTree):
        with pytest.raises(NotFoundError):
            sample_tree.move("missing", "A")

    def test_move_backwards_in_document_order(self, sample_tree: IntervalTree):
        """Moving a later subtree under an earlier node renumbers correctly."""
        sample_tree.move("C", "B1")

        assert sample_tree.get("B1").contains(sample_tree.get("C1"))
        assert sample_tree.get("C1").depth == 4
        sample_tree.check_integrity()


class TestDelete:
    """Tests for IntervalTree.delete."""

    def test_delete_leaf(self, sample_tree: IntervalTree):
        change = sample_tree.delete("B1")

        assert change.removed == ["B1"]
        assert _bounds(sample_tree)["B"] == (2, 3, 1)
        sample_tree.check_integrity()

    def test_delete_inner_node_without_cascade_fails(self, sample_tree: IntervalTree):
        before = _bounds(sample_tree)

        with pytest.raises(HasChildrenError) as exc_info:
            sample_tree.delete("C")

        assert exc_info.value.descendant_count == 1
        assert _bounds(sample_tree) == before

    def test_cascade_delete_removes_subtree_and_compacts(self, sample_tree: IntervalTree):
        sample_tree.insert("A", "D")
        width = sample_tree.get("C").width
        d_before = sample_tree.get("D").left
        count = sample_tree.get("C").descendant_count

        change = sample_tree.delete("C", cascade=True)

        assert change.removed == ["C", "C1"]
        assert "C1" not in sample_tree
        assert len(sample_tree) == 4
        assert len(change.removed) == count + 1
        assert sample_tree.get("D").left == d_before - width
        assert sample_tree.get("A").right == 8
        sample_tree.check_integrity()

    def test_delete_missing_node(self, sample_tree: IntervalTree):
        with pytest.raises(NotFoundError):
            sample_tree.delete("missing")


class TestQueries:
    """Tests for ancestor, descendant and sibling queries."""

    def test_ancestors_root_first(self, sample_tree: IntervalTree):
        assert [n.id for n in sample_tree.ancestors("C1")] == ["A", "C"]
        assert [n.id for n in sample_tree.ancestors("C1", include_self=True)] == ["A", "C", "C1"]

    def test_descendants_pre_order(self, sample_tree: IntervalTree):
        assert [n.id for n in sample_tree.descendants("A")] == ["B", "B1", "C", "C1"]

    def test_descendants_max_depth(self, sample_tree: IntervalTree):
        assert [n.id for n in sample_tree.descendants("A", max_depth=1)] == ["B", "C"]

    def test_siblings(self, sample_tree: IntervalTree):
        assert [n.id for n in sample_tree.siblings("B")] == ["C"]
        assert [n.id for n in sample_tree.siblings("B", include_self=True)] == ["B", "C"]

    def test_root_siblings(self):
        tree = IntervalTree()
        for node_id in (1, 2, 3):
            tree.insert(None, node_id)

        assert [n.id for n in tree.siblings(2)] == [1, 3]

    def test_sibling_ties_break_by_id(self):
        tree = IntervalTree(
            [
                NodeBounds(2, None, 1, 2, ordering=1),
                NodeBounds(1, None, 3, 4, ordering=1),
            ]
        )

        assert [n.id for n in tree.roots()] == [1, 2]

    def test_is_ancestor(self, sample_tree: IntervalTree):
        assert sample_tree.is_ancestor("A", "C1")
        assert not sample_tree.is_ancestor("B", "C1")


class TestRebuildAndIntegrity:
    """Tests for rebuild and check_integrity."""

    def test_rebuild_repairs_bounds(self):
        tree = IntervalTree(
            [
                NodeBounds("root", None, 0, 0),
                NodeBounds("child", "root", 0, 0),
                NodeBounds("grandchild", "child", 0, 0),
            ]
        )

        tree.rebuild()

        assert _bounds(tree) == {
            "root": (1, 6, 0),
            "child": (2, 5, 1),
            "grandchild": (3, 4, 2),
        }
        tree.check_integrity()

    def test_rebuild_detects_cycles(self):
        tree = IntervalTree(
            [
                NodeBounds("a", "b", 1, 2),
                NodeBounds("b", "a", 3, 4),
            ]
        )

        with pytest.raises(CircularReferenceError):
            tree.rebuild()

    def test_rebuild_detects_missing_parent(self):
        tree = IntervalTree([NodeBounds("a", "ghost", 1, 2)])

        with pytest.raises(InvalidParentError):
            tree.rebuild()

    def test_integrity_flags_gaps(self):
        tree = IntervalTree([NodeBounds(1, None, 1, 4)])

        with pytest.raises(TreeIntegrityError):
            tree.check_integrity()

    def test_integrity_flags_wrong_depth(self):
        tree = IntervalTree(
            [
                NodeBounds(1, None, 1, 4, depth=0),
                NodeBounds(2, 1, 2, 3, depth=5),
            ]
        )

        with pytest.raises(TreeIntegrityError) as exc_info:
            tree.check_integrity()

        assert exc_info.value.node_id == 2

    def test_integrity_flags_wrong_parent(self):
        tree = IntervalTree(
            [
                NodeBounds(1, None, 1, 4),
                NodeBounds(2, None, 2, 3, depth=1),
            ]
        )

        with pytest.raises(TreeIntegrityError):
            tree.check_integrity()

    def test_random_operations_keep_invariants(self):
        """Any sequence of insert/move/delete leaves a valid forest."""
        rng = random.Random(20241019)
        tree = IntervalTree()
        next_id = 1

        for _ in range(300):
            ids = [n.id for n in tree.nodes()]
            action = rng.random()
            if not ids or action < 0.5:
                parent = rng.choice([None, *ids])
                tree.insert(parent, next_id)
                next_id += 1
            elif action < 0.8:
                node_id = rng.choice(ids)
                target = rng.choice([None, *ids])
                try:
                    tree.move(node_id, target)
                except CircularReferenceError:
                    assert target is not None
                    assert target == node_id or tree.is_ancestor(node_id, target)
            else:
                tree.delete(rng.choice(ids), cascade=True)

            tree.check_integrity()
