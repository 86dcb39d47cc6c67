"""Tests for NestedSetRepository against SQLite."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from content_service.core.database import (
    CircularReferenceError,
    ConcurrentModificationError,
    HasChildrenError,
    InvalidParentError,
    NotFoundError,
    TreeIntegrityError,
)
from content_service.core.database.hierarchy.locking import ForestLock, NestedSetForest
from content_service.core.models import Base
from content_service.features.categories.models import Category
from content_service.features.categories.repository import CategoryRepository
from content_service.infra.database.session import configure_sqlite_engine


@pytest.fixture
def repo() -> CategoryRepository:
    return CategoryRepository()


async def _add(session, repo: CategoryRepository, name: str, parent: Category | None = None) -> Category:
    node = Category(name=name, slug=name.lower())
    return await repo.insert_node(session, node, parent.id if parent else None)


async def _layout(session) -> dict[str, tuple[int, int, int]]:
    result = await session.execute(select(Category).order_by(Category.left))
    return {c.name: (c.left, c.right, c.depth) for c in result.scalars().all()}


@pytest.fixture
async def forest(db_session, repo) -> dict[str, Category]:
    """A(1,10) with B(2,5) holding B1 and C(6,9) holding C1."""
    a = await _add(db_session, repo, "A")
    b = await _add(db_session, repo, "B", a)
    b1 = await _add(db_session, repo, "B1", b)
    c = await _add(db_session, repo, "C", a)
    c1 = await _add(db_session, repo, "C1", c)
    return {"A": a, "B": b, "B1": b1, "C": c, "C1": c1}


class TestInsertNode:
    """Tests for insert_node."""

    async def test_first_root(self, db_session, repo):
        root = await _add(db_session, repo, "News")

        assert (root.left, root.right, root.depth, root.ordering) == (1, 2, 0, 1)
        assert root.parent_id is None

    async def test_forest_layout(self, db_session, forest):
        assert await _layout(db_session) == {
            "A": (1, 10, 0),
            "B": (2, 5, 1),
            "B1": (3, 4, 2),
            "C": (6, 9, 1),
            "C1": (7, 8, 2),
        }

    async def test_insert_under_root(self, db_session, repo, forest):
        d = await _add(db_session, repo, "D", forest["A"])

        assert (d.left, d.right, d.depth) == (10, 11, 1)
        await db_session.refresh(forest["A"])
        assert forest["A"].right == 12

    async def test_missing_parent(self, db_session, repo, forest):
        before = await _layout(db_session)

        with pytest.raises(InvalidParentError):
            await repo.insert_node(db_session, Category(name="X", slug="x"), 999)

        assert await _layout(db_session) == before

    async def test_every_insert_advances_forest_version(self, db_session, repo, forest):
        stmt = select(NestedSetForest.version).where(NestedSetForest.forest == "categories")

        assert (await db_session.execute(stmt)).scalar_one() == 5


class TestMoveNode:
    """Tests for move_node."""

    async def test_move_under_sibling(self, db_session, repo, forest):
        await _add(db_session, repo, "D", forest["A"])

        moved = await repo.move_node(db_session, forest["B"].id, forest["C"].id)

        layout = await _layout(db_session)
        assert moved.parent_id == forest["C"].id
        assert moved.depth == 2
        assert layout["A"] == (1, 12, 0)
        assert layout["C"][0] < layout["B"][0] and layout["B"][1] < layout["C"][1]
        assert await repo.check_integrity(db_session) == 6

    async def test_move_under_descendant_leaves_bounds(self, db_session, repo, forest):
        before = await _layout(db_session)

        with pytest.raises(CircularReferenceError):
            await repo.move_node(db_session, forest["A"].id, forest["C1"].id)

        assert await _layout(db_session) == before

    async def test_move_under_self(self, db_session, repo, forest):
        with pytest.raises(CircularReferenceError):
            await repo.move_node(db_session, forest["B"].id, forest["B"].id)

    async def test_move_missing_node(self, db_session, repo, forest):
        with pytest.raises(NotFoundError):
            await repo.move_node(db_session, 999, forest["A"].id)

    async def test_move_to_root(self, db_session, repo, forest):
        moved = await repo.move_node(db_session, forest["C"].id, None)

        assert moved.parent_id is None
        assert [r.name for r in await repo.get_roots(db_session)] == ["A", "C"]
        assert await repo.check_integrity(db_session) == 5


class TestDeleteNode:
    """Tests for delete_node."""

    async def test_delete_leaf(self, db_session, repo, forest):
        removed = await repo.delete_node(db_session, forest["B1"].id)

        assert removed == 1
        assert (await _layout(db_session))["B"] == (2, 3, 1)

    async def test_refuse_inner_node(self, db_session, repo, forest):
        with pytest.raises(HasChildrenError):
            await repo.delete_node(db_session, forest["C"].id)

        assert len(await _layout(db_session)) == 5

    async def test_cascade_removes_subtree_and_compacts(self, db_session, repo, forest):
        await _add(db_session, repo, "D", forest["A"])
        before = await _layout(db_session)
        c_left, c_right, _ = before["C"]

        removed = await repo.delete_node(db_session, forest["C"].id, cascade=True)

        layout = await _layout(db_session)
        assert removed == 2
        assert set(layout) == {"A", "B", "B1", "D"}
        assert layout["D"][0] == before["D"][0] - (c_right - c_left + 1)
        assert layout["A"] == (1, 8, 0)
        assert await repo.check_integrity(db_session) == 4


class TestReads:
    """Tests for the read helpers."""

    async def test_ancestors(self, db_session, repo, forest):
        ancestors = await repo.get_ancestors(db_session, forest["C1"].id)

        assert [a.name for a in ancestors] == ["A", "C"]

    async def test_descendants(self, db_session, repo, forest):
        descendants = await repo.get_descendants(db_session, forest["A"].id)

        assert [d.name for d in descendants] == ["B", "B1", "C", "C1"]

    async def test_descendants_with_depth_limit(self, db_session, repo, forest):
        descendants = await repo.get_descendants(db_session, forest["A"].id, max_depth=1)

        assert [d.name for d in descendants] == ["B", "C"]

    async def test_siblings(self, db_session, repo, forest):
        siblings = await repo.get_siblings(db_session, forest["B"].id)

        assert [s.name for s in siblings] == ["C"]

    async def test_children(self, db_session, repo, forest):
        children = await repo.get_children(db_session, forest["A"].id)

        assert [c.name for c in children] == ["B", "C"]

    async def test_reads_on_missing_node(self, db_session, repo):
        with pytest.raises(NotFoundError):
            await repo.get_ancestors(db_session, 42)


class TestRebuild:
    """Tests for rebuild and check_integrity."""

    async def test_rebuild_repairs_corrupted_bounds(self, db_session, repo, forest):
        await db_session.execute(
            update(Category)
            .where(Category.id == forest["C1"].id)
            .values(left=50, right=51)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(TreeIntegrityError):
            await repo.check_integrity(db_session)

        changed = await repo.rebuild(db_session)

        assert changed >= 1
        assert await repo.check_integrity(db_session) == 5
        assert (await _layout(db_session))["C1"] == (7, 8, 2)


class TestReadsParent:
    """Tests for get_parent."""

    async def test_parent_of_child(self, db_session, repo, forest):
        parent = await repo.get_parent(db_session, forest["C1"].id)

        assert parent is not None
        assert parent.name == "C"

    async def test_root_has_no_parent(self, db_session, repo, forest):
        assert await repo.get_parent(db_session, forest["A"].id) is None


async def _raw_layout(session) -> dict[str, tuple[int, int, int]]:
    """Bounds as stored, bypassing the identity map."""
    stmt = select(Category.name, Category.left, Category.right, Category.depth).order_by(Category.left)
    return {name: (left, right, depth) for name, left, right, depth in await session.execute(stmt)}


class TestFailedVersionAdvance:
    """A lost version race must leave no renumbering behind."""

    @pytest.fixture
    def stale_advance(self, monkeypatch: pytest.MonkeyPatch):
        async def advance(self, session, seen_version):
            raise ConcurrentModificationError(self.forest, f"version {seen_version} is stale")

        monkeypatch.setattr(ForestLock, "advance", advance)

    async def _version(self, session) -> int:
        stmt = select(NestedSetForest.version).where(NestedSetForest.forest == "categories")
        return (await session.execute(stmt)).scalar_one()

    async def test_insert_rolls_back_renumbering(self, db_session, repo, forest, stale_advance):
        before = await _raw_layout(db_session)
        version = await self._version(db_session)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await _add(db_session, repo, "D", forest["A"])

        assert exc_info.value.retryable is True
        assert await _raw_layout(db_session) == before
        assert await self._version(db_session) == version

    async def test_move_rolls_back_renumbering(self, db_session, repo, forest, stale_advance):
        before = await _raw_layout(db_session)

        with pytest.raises(ConcurrentModificationError):
            await repo.move_node(db_session, forest["B"].id, forest["C"].id)

        assert await _raw_layout(db_session) == before

    async def test_delete_rolls_back_removal(self, db_session, repo, forest, stale_advance):
        before = await _raw_layout(db_session)

        with pytest.raises(ConcurrentModificationError):
            await repo.delete_node(db_session, forest["C"].id, cascade=True)

        assert await _raw_layout(db_session) == before


class TestConcurrentInserts:
    """Inserts from independent sessions into one forest."""

    WORKERS = 8

    @pytest.fixture
    async def session_factory(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'forest.db'}",
            connect_args={"timeout": 30},
        )
        configure_sqlite_engine(engine)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        try:
            yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        finally:
            await engine.dispose()

    async def test_parallel_inserts_keep_forest_valid(self, session_factory):
        repo = CategoryRepository()
        async with session_factory() as session, session.begin():
            root = await repo.insert_node(session, Category(name="Root", slug="root"))
        root_id = root.id

        async def insert_child(n: int) -> None:
            # The core never retries; callers retry retryable failures.
            for _ in range(100):
                try:
                    async with session_factory() as session, session.begin():
                        child = Category(name=f"Child {n}", slug=f"child-{n}")
                        await repo.insert_node(session, child, root_id)
                    return
                except (ConcurrentModificationError, OperationalError):
                    await asyncio.sleep(0.01)
            pytest.fail(f"child {n} was never inserted")

        await asyncio.gather(*(insert_child(n) for n in range(self.WORKERS)))

        async with session_factory() as session:
            assert await repo.check_integrity(session) == self.WORKERS + 1

            root_row = await repo.get_or_raise(session, root_id)
            assert (root_row.left, root_row.right) == (1, 2 * (self.WORKERS + 1))

            children = await repo.get_children(session, root_id)
            assert sorted(c.ordering for c in children) == list(range(1, self.WORKERS + 1))

            version_stmt = select(NestedSetForest.version).where(NestedSetForest.forest == "categories")
            assert (await session.execute(version_stmt)).scalar_one() == self.WORKERS + 1

            count_stmt = select(func.count()).select_from(Category)
            assert (await session.execute(count_stmt)).scalar_one() == self.WORKERS + 1
