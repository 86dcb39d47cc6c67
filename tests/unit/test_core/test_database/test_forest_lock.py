"""Tests for the per-forest version row and lock."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from content_service.core.database.exceptions import ConcurrentModificationError
from content_service.core.database.hierarchy.locking import ForestLock, NestedSetForest


async def _version(session, forest: str) -> int:
    stmt = select(NestedSetForest.version).where(NestedSetForest.forest == forest)
    return (await session.execute(stmt)).scalar_one()


class TestForestLock:
    """Tests for ForestLock acquire/advance."""

    async def test_acquire_creates_row_on_demand(self, db_session):
        version = await ForestLock("categories").acquire(db_session)

        assert version == 0
        assert await _version(db_session, "categories") == 0

    async def test_acquire_is_idempotent_for_existing_row(self, db_session):
        lock = ForestLock("menus")
        await lock.acquire(db_session)
        await lock.advance(db_session, 0)

        assert await lock.acquire(db_session) == 1

    async def test_advance_bumps_version(self, db_session):
        lock = ForestLock("comments")
        seen = await lock.acquire(db_session)

        new_version = await lock.advance(db_session, seen)

        assert new_version == seen + 1
        assert await _version(db_session, "comments") == new_version

    async def test_stale_version_is_rejected(self, db_session):
        lock = ForestLock("categories")
        seen = await lock.acquire(db_session)
        await lock.advance(db_session, seen)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await lock.advance(db_session, seen)

        assert exc_info.value.retryable is True
        assert exc_info.value.forest == "categories"

    async def test_hold_advances_only_on_success(self, db_session):
        lock = ForestLock("categories")

        async with lock.hold(db_session) as version:
            assert version == 0
        assert await _version(db_session, "categories") == 1

        with pytest.raises(RuntimeError):
            async with lock.hold(db_session):
                raise RuntimeError("boom")
        assert await _version(db_session, "categories") == 1

    async def test_forests_are_independent(self, db_session):
        await ForestLock("categories").acquire(db_session)
        await ForestLock("menus").acquire(db_session)
        await ForestLock("menus").advance(db_session, 0)

        assert await _version(db_session, "categories") == 0
        assert await _version(db_session, "menus") == 1
