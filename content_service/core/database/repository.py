"""Minimal generic repository for SQLAlchemy models.

Provides basic CRUD operations with explicit session passing.
For complex queries, use the session directly - this is a convenience, not a cage.

Example:
    from content_service.core.database import BaseRepository
    from content_service.features.tags.models import Tag

    class TagRepository(BaseRepository[Tag]):
        async def get_by_slug(self, session: AsyncSession, slug: str) -> Tag | None:
            return await self.get_by(session, Tag.slug, slug)

    repo = TagRepository(Tag)
    tag = await repo.get_or_raise(session, tag_id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy import delete as sql_delete
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from content_service.core.database.exceptions import NotFoundError, RepositoryError
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute


def dialect_insert(session: AsyncSession, model: Any) -> Any:
    """Build an INSERT that supports ``ON CONFLICT`` for the session's backend.

    PostgreSQL runs in production and SQLite backs the test suite; both
    dialects expose ``on_conflict_do_nothing`` / ``on_conflict_do_update``
    with the same signature.

    Args:
        session: Database session whose bind decides the dialect
        model: Mapped class or Table to insert into

    Returns:
        Dialect-specific Insert construct

    Raises:
        RepositoryError: If the backend has no ON CONFLICT support
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    raise RepositoryError(
        "Upserts require PostgreSQL or SQLite",
        details={"dialect": dialect},
    )


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Minimal generic repository for CRUD operations.

    Provides:
        - get(session, id) -> T | None
        - get_or_raise(session, id) -> T (raises NotFoundError)
        - get_by(session, attr, value) -> T | None
        - create(session, instance) -> T
        - delete(session, instance) -> None
        - delete_many(session, ids) -> int

    Session is always explicit - no hidden state.
    """

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., Category, Tag)
        """
        self.model = model
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    async def get(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        *,
        options: Iterable[Any] | None = None,
    ) -> T | None:
        """Get entity by primary key.

        Args:
            session: Database session
            id: Primary key value
            options: SQLAlchemy loader options (e.g., selectinload)

        Returns:
            Entity if found, None otherwise
        """
        if options:
            stmt = select(self.model).where(self._pk_attr() == id).options(*options)
            result = await session.execute(stmt)
            instance = result.scalar_one_or_none()
        else:
            instance = await session.get(self.model, id)

        self._lazy.debug(
            lambda: f"db.get: {self.model.__name__}({id}) -> {'found' if instance else 'not found'}"
        )
        return instance

    async def get_or_raise(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        *,
        options: Iterable[Any] | None = None,
    ) -> T:
        """Get entity by primary key or raise NotFoundError.

        Args:
            session: Database session
            id: Primary key value
            options: SQLAlchemy loader options

        Returns:
            Entity instance

        Raises:
            NotFoundError: If entity doesn't exist
        """
        instance = await self.get(session, id, options=options)
        if instance is None:
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def get_by(
        self,
        session: AsyncSession,
        attr: InstrumentedAttribute[Any],
        value: Any,
    ) -> T | None:
        """Get entity by arbitrary attribute.

        Args:
            session: Database session
            attr: Model attribute to filter by (e.g., Category.slug)
            value: Value to match

        Returns:
            First matching entity or None
        """
        stmt = select(self.model).where(attr == value).limit(1)
        result = await session.execute(stmt)
        instance = result.scalar_one_or_none()

        self._lazy.debug(
            lambda: f"db.get_by: {self.model.__name__}.{attr.key}={value!r} -> {'found' if instance else 'not found'}"
        )
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Persist a new entity.

        Adds to session, flushes to get generated values (like id),
        and refreshes to ensure instance is up-to-date.

        Args:
            session: Database session
            instance: Entity instance to persist

        Returns:
            Persisted entity with generated fields populated
        """
        session.add(instance)
        await session.flush()
        await session.refresh(instance)

        entity_id = getattr(instance, "id", None)
        self._lazy.debug(lambda: f"db.create: {self.model.__name__}(id={entity_id})")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        """Delete an entity.

        Args:
            session: Database session
            instance: Entity to delete
        """
        entity_id = getattr(instance, "id", None)
        await session.delete(instance)
        await session.flush()

        self._logger.info(
            "Entity deleted",
            extra={"entity": self.model.__name__, "id": str(entity_id), "operation": "db.delete"},
        )

    async def delete_many(
        self,
        session: AsyncSession,
        ids: Iterable[Any],
    ) -> int:
        """Delete multiple entities by primary key in one statement.

        Instances already loaded in the session are marked deleted through
        the ORM-enabled DELETE's session synchronization.

        Args:
            session: Database session
            ids: Primary key values to delete

        Returns:
            Number of rows deleted
        """
        ids_list = list(ids)
        if not ids_list:
            return 0

        stmt = sql_delete(self.model).where(self._pk_attr().in_(ids_list))
        result = await session.execute(stmt)
        deleted_count: int = cast("Any", result).rowcount or 0

        # WARNING level for bulk deletes > 10 (audit-worthy)
        if deleted_count > 10:
            self._logger.warning(
                "Bulk delete executed",
                extra={
                    "entity": self.model.__name__,
                    "requested": len(ids_list),
                    "deleted": deleted_count,
                    "operation": "db.delete_many",
                },
            )
        else:
            self._lazy.debug(
                lambda: f"db.delete_many: {self.model.__name__} -> {deleted_count} deleted"
            )
        return deleted_count

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        """Get primary key attribute.

        Inspects the model to find the primary key column and falls back
        to ``id``.
        """
        mapper = sa_inspect(self.model, raiseerr=False)
        pk_cols = getattr(mapper, "primary_key", None)
        if pk_cols:
            return cast("InstrumentedAttribute[Any]", getattr(self.model, pk_cols[0].key))

        attr = getattr(self.model, "id", None)
        if attr is None:
            raise AttributeError(f"{self.model.__name__} has no 'id' attribute")
        return cast("InstrumentedAttribute[Any]", attr)


__all__ = [
    "BaseRepository",
    "dialect_insert",
]
