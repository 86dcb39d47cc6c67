"""Modular Pydantic Settings v2 configuration.

One frozen settings class per domain, each with its own environment prefix:

- ``APP_``  application identity and docs toggles
- ``DB_``   database connection and pool
- ``LOG_``  logging
- ``TREE_`` nested-set forest locking

Import settings via the cached loaders:
    from content_service.core.settings import get_db_settings
"""

from __future__ import annotations

from .app import AppSettings
from .hierarchy import HierarchySettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_hierarchy_settings,
    get_logging_settings,
)
from .logs import LoggingSettings
from .postgres import PostgresSettings

__all__ = [
    "AppSettings",
    "HierarchySettings",
    "LoggingSettings",
    "PostgresSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_hierarchy_settings",
    "get_logging_settings",
]
