"""Tests for the RFC 7807 exception handlers."""

from __future__ import annotations

from uuid import UUID

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field

from content_service.app.exception_handlers import (
    PROBLEM_JSON,
    RETRY_AFTER_SECONDS,
    classify_repository_error,
)
from content_service.app.main import create_app
from content_service.core.database.exceptions import (
    CircularReferenceError,
    ConcurrentModificationError,
    HasChildrenError,
    InvalidAttachableKindError,
    InvalidOwnerTypeError,
    InvalidParentError,
    NotFoundError,
    RepositoryError,
    TreeIntegrityError,
)
from content_service.core.exceptions import ConflictException, InvalidTransitionError, NotFoundException
from content_service.features.media.schemas import MediaCreate

MENU_ID = UUID("00000000-0000-4000-8000-000000000001")

router = APIRouter()


class Payload(BaseModel):
    name: str = Field(..., min_length=2)


@router.get("/conflict")
async def raise_conflict():
    raise ConflictException(
        detail="Category with name 'News' already exists",
        type="category-name-exists",
        extra={"name": "News"},
    )


@router.get("/transition")
async def raise_transition():
    raise InvalidTransitionError("Post", "archived", "published", 3)


@router.get("/missing-page")
async def raise_missing_page():
    raise NotFoundException(detail="No published post at this slug", extra={"slug": "launch"})


@router.get("/missing-menu")
async def raise_missing_menu():
    raise NotFoundError("Menu", {"id": MENU_ID})


@router.get("/busy")
async def raise_busy():
    raise ConcurrentModificationError("categories", "lock wait timed out")


@router.get("/corrupt")
async def raise_corrupt():
    raise TreeIntegrityError("Category", "gap in interval numbering", node_id=4)


@router.post("/payload")
async def accept_payload(payload: Payload):
    return {"name": payload.name}


@router.get("/stored-row")
async def raise_pydantic():
    MediaCreate.model_validate({"name": "x", "file_name": "x", "mime_type": "png", "size": 0})


@router.get("/boom")
async def raise_unexpected():
    raise RuntimeError("secret internals")


@pytest.fixture
async def handler_client():
    app = create_app([router], use_lifespan=False)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestClassifyRepositoryError:
    """Tests for the repository error to HTTP mapping."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (NotFoundError("Category", {"id": 1}), (404, "not-found")),
            (InvalidParentError("Category", 9), (422, "invalid-parent")),
            (CircularReferenceError("Category", 1, 2), (422, "circular-reference")),
            (HasChildrenError("Category", 1, 3), (409, "has-children")),
            (InvalidOwnerTypeError("invoice", "tag"), (422, "invalid-owner-type")),
            (InvalidAttachableKindError("sticker"), (422, "invalid-attachable-kind")),
            (ConcurrentModificationError("menus", "stale"), (409, "concurrent-modification")),
            (TreeIntegrityError("Menu", "overlap"), (500, "tree-integrity")),
            (RepositoryError("bulk delete failed"), (500, "repository-error")),
        ],
    )
    def test_mapping(self, error, expected):
        assert classify_repository_error(error) == expected


class TestProblemResponses:
    """End-to-end problem detail responses."""

    async def test_app_exception(self, handler_client):
        response = await handler_client.get("/conflict")

        body = response.json()
        assert response.status_code == 409
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert body["type"] == "category-name-exists"
        assert body["title"] == "Conflict"
        assert body["name"] == "News"
        assert body["request_id"] == response.headers["x-request-id"]

    async def test_invalid_transition(self, handler_client):
        response = await handler_client.get("/transition")

        body = response.json()
        assert response.status_code == 409
        assert body["type"] == "invalid-status-transition"
        assert body["from_status"] == "archived"

    async def test_app_not_found(self, handler_client):
        response = await handler_client.get("/missing-page")

        body = response.json()
        assert response.status_code == 404
        assert body["title"] == "Not Found"
        assert body["slug"] == "launch"

    async def test_not_found_with_uuid_details(self, handler_client):
        response = await handler_client.get("/missing-menu")

        body = response.json()
        assert response.status_code == 404
        assert body["type"] == "not-found"
        assert body["model"] == "Menu"
        assert body["id"] == str(MENU_ID)

    async def test_retryable_error(self, handler_client):
        response = await handler_client.get("/busy")

        body = response.json()
        assert response.status_code == 409
        assert response.headers["retry-after"] == str(RETRY_AFTER_SECONDS)
        assert body["retryable"] is True
        assert body["forest"] == "categories"

    async def test_integrity_error_is_server_error(self, handler_client):
        response = await handler_client.get("/corrupt")

        assert response.status_code == 500
        assert response.json()["type"] == "tree-integrity"
        assert "retry-after" not in response.headers

    async def test_request_validation(self, handler_client):
        response = await handler_client.post("/payload", json={"name": "x"})

        body = response.json()
        assert response.status_code == 422
        assert body["type"] == "validation-error"
        assert body["errors"][0]["field"] == "body.name"

    async def test_pydantic_validation(self, handler_client):
        response = await handler_client.get("/stored-row")

        body = response.json()
        assert response.status_code == 422
        assert {e["field"] for e in body["errors"]} == {"mime_type", "size"}

    async def test_unexpected_error_hides_internals(self, handler_client):
        response = await handler_client.get("/boom")

        body = response.json()
        assert response.status_code == 500
        assert body["type"] == "internal-error"
        assert "secret" not in body["detail"]
        assert body["request_id"]


class TestRequestId:
    """Tests for RequestIDMiddleware."""

    async def test_incoming_id_is_echoed(self, handler_client):
        response = await handler_client.get("/conflict", headers={"X-Request-ID": "req-123"})

        assert response.headers["x-request-id"] == "req-123"
        assert response.json()["request_id"] == "req-123"

    async def test_id_is_generated(self, handler_client):
        response = await handler_client.post("/payload", json={"name": "ok"})

        assert response.status_code == 200
        assert UUID(response.headers["x-request-id"])
