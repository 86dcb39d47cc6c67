"""Application lifespan management.

Startup: logging, then database connectivity. Shutdown disposes the engine.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from content_service.core.settings import get_app_settings
from content_service.infra.database.session import close_database, init_database
from content_service.infra.logging.config import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop the services the content core depends on.

    Args:
        app: FastAPI application instance.

    Yields:
        None while the application is serving requests.
    """
    app_settings = get_app_settings()
    setup_logging()

    logger.info(
        "Application starting",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
        },
    )

    await init_database()
    try:
        yield
    finally:
        logger.info("Application shutting down", extra={"service": app_settings.service_name})
        await close_database()
