"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from content_service.app.exception_handlers import configure_exception_handlers
from content_service.app.lifespan import lifespan
from content_service.app.middleware import configure_middleware
from content_service.core.settings import get_app_settings

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fastapi import APIRouter


def create_app(routers: Iterable[APIRouter] = (), *, use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    The content core ships no routes of its own; an HTTP layer passes its
    routers here and gets RFC 7807 responses for every core error.

    Args:
        routers: Routers to mount.
        use_lifespan: Run logging and database startup hooks.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        docs_url=app_settings.get_docs_url(),
        redoc_url=None,
        openapi_url=app_settings.get_openapi_url(),
        debug=app_settings.debug,
        lifespan=lifespan if use_lifespan else None,
    )

    # Exception handlers before middleware
    configure_exception_handlers(app)
    configure_middleware(app)

    for router in routers:
        app.include_router(router)

    return app
