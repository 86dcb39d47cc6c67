"""Database infrastructure: async engine, session factory, startup checks.

Example:
    from content_service.infra.database import get_async_session

    async with get_async_session() as session:
        tree = await get_category_repository().get_tree(session)
"""

from .session import (
    close_database,
    database_url,
    get_async_session,
    get_engine,
    get_session_factory,
    init_database,
)

__all__ = [
    "close_database",
    "database_url",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "init_database",
]
