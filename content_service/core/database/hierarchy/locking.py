"""Per-forest exclusive section for nested-set mutations.

Renumbering touches rows far away from the node being changed, so two
concurrent inserts into the same table would corrupt each other's
intervals. Every structural mutation therefore serialises on one row of
``nested_set_forests``:

1. the row is created on demand (``INSERT ... ON CONFLICT DO NOTHING``);
2. it is locked with ``SELECT ... FOR UPDATE`` (PostgreSQL bounds the wait
   with ``SET LOCAL lock_timeout``; SQLite serialises writers itself);
3. after the batch is written its ``version`` is advanced with a
   compare-and-swap ``UPDATE ... WHERE version = :seen``.

A lock timeout, a busy database or a lost compare-and-swap surfaces as
ConcurrentModificationError. The lock never retries on the caller's behalf.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import DateTime, Integer, String, select, text, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from content_service.core.database.base import Base
from content_service.core.database.exceptions import ConcurrentModificationError
from content_service.core.database.repository import dialect_insert
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession

lazy_logger = get_lazy_logger(__name__)


class NestedSetForest(Base):
    """Version row guarding one nested-set forest."""

    __tablename__ = "nested_set_forests"

    forest: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        comment="Forest key (the hierarchical table name)",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
        comment="Incremented by every structural mutation",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp of the last structural mutation",
    )

    def __repr__(self) -> str:
        return f"<NestedSetForest(forest={self.forest!r}, version={self.version})>"


class ForestLock:
    """Database-level exclusive section for one forest.

    Args:
        forest: Forest key, normally the hierarchical table name
        timeout_ms: Maximum wait for the row lock on PostgreSQL;
            None leaves the server default in place
    """

    def __init__(self, forest: str, *, timeout_ms: int | None = None) -> None:
        self.forest = forest
        self.timeout_ms = timeout_ms

    async def acquire(self, session: AsyncSession) -> int:
        """Lock the forest row and return the version seen under the lock.

        Must run inside a transaction; the lock is held until it ends.

        Raises:
            ConcurrentModificationError: If the lock cannot be obtained
        """
        dialect = session.get_bind().dialect.name
        try:
            ensure = dialect_insert(session, NestedSetForest).values(
                forest=self.forest, version=0
            )
            await session.execute(ensure.on_conflict_do_nothing(index_elements=["forest"]))

            if dialect == "postgresql" and self.timeout_ms is not None:
                # SET does not accept bind parameters; the value is an int.
                await session.execute(text(f"SET LOCAL lock_timeout = {int(self.timeout_ms)}"))

            stmt = (
                select(NestedSetForest.version)
                .where(NestedSetForest.forest == self.forest)
                .with_for_update()
            )
            version = (await session.execute(stmt)).scalar_one()
        except DBAPIError as exc:
            raise ConcurrentModificationError(self.forest, "forest lock unavailable") from exc

        lazy_logger.debug(lambda: f"forest.acquire: {self.forest} at version {version}")
        return version

    async def advance(self, session: AsyncSession, seen_version: int) -> int:
        """Advance the forest version if nobody else did since ``acquire``.

        Returns:
            The new version

        Raises:
            ConcurrentModificationError: If the version moved underneath us
        """
        stmt = (
            update(NestedSetForest)
            .where(
                NestedSetForest.forest == self.forest,
                NestedSetForest.version == seen_version,
            )
            .values(version=NestedSetForest.version + 1, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(stmt)
        except DBAPIError as exc:
            raise ConcurrentModificationError(self.forest, "forest version update failed") from exc

        if cast("Any", result).rowcount != 1:
            raise ConcurrentModificationError(
                self.forest, f"version {seen_version} is stale"
            )
        lazy_logger.debug(lambda: f"forest.advance: {self.forest} -> {seen_version + 1}")
        return seen_version + 1

    @asynccontextmanager
    async def hold(self, session: AsyncSession) -> AsyncIterator[int]:
        """Hold the forest for the duration of the block.

        The version is advanced only when the block completes without
        raising.

        Example:
            async with session.begin_nested():
                async with ForestLock("categories").hold(session):
                    ...  # read forest, compute, write batch
        """
        version = await self.acquire(session)
        yield version
        await self.advance(session, version)


__all__ = [
    "ForestLock",
    "NestedSetForest",
]
