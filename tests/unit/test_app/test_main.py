"""Tests for the application factory and lifespan."""

from __future__ import annotations

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from content_service.app.main import create_app
from content_service.infra.database.session import close_database, get_engine


class TestCreateApp:
    """Tests for create_app."""

    def test_metadata_from_settings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APP_TITLE", "Newsroom API")

        app = create_app(use_lifespan=False)

        assert app.title == "Newsroom API"
        assert app.docs_url == "/docs"
        assert app.redoc_url is None

    def test_docs_can_be_disabled(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APP_DISABLE_DOCS", "true")

        app = create_app(use_lifespan=False)

        assert app.docs_url is None
        assert app.openapi_url is None

    async def test_routers_are_mounted(self):
        router = APIRouter(prefix="/categories")

        @router.get("/")
        async def list_categories():
            return [{"name": "News"}]

        app = create_app([router], use_lifespan=False)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/categories/")

        assert response.status_code == 200
        assert response.json() == [{"name": "News"}]

    async def test_unknown_route_gets_request_id(self, client):
        response = await client.get("/does-not-exist")

        assert response.status_code == 404
        assert "x-request-id" in response.headers


class TestLifespan:
    """Tests for startup and shutdown hooks."""

    async def test_database_checked_and_disposed(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        await close_database()
        app = create_app()

        async with app.router.lifespan_context(app):
            assert get_engine.cache_info().currsize == 1
            assert get_engine().dialect.name == "sqlite"

        assert get_engine.cache_info().currsize == 0
