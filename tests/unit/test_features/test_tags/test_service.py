"""Unit tests for TagService."""

from __future__ import annotations

import pytest

from content_service.core.database import InvalidOwnerTypeError, NotFoundError, OwnerType
from content_service.core.exceptions import ConflictException
from content_service.features.tags.models import DEFAULT_TAG_COLORS, TagType
from content_service.features.tags.schemas import TagCreate, TagUpdate
from content_service.features.tags.service import TagService


@pytest.fixture
def service(db_session) -> TagService:
    return TagService(db_session)


@pytest.fixture
async def python_tag(service: TagService):
    return await service.create_tag(TagCreate(name="Python"))


class TestTagCrud:
    """Tests for tag creation, update and deletion."""

    async def test_create_uses_type_colour(self, service):
        tag = await service.create_tag(TagCreate(name="beta", type=TagType.FEATURE))

        assert tag.color == DEFAULT_TAG_COLORS[TagType.FEATURE]
        assert tag.slug == "beta"

    async def test_duplicate_name(self, service, python_tag):
        with pytest.raises(ConflictException) as exc_info:
            await service.create_tag(TagCreate(name="PYTHON"))

        assert exc_info.value.type == "tag-name-exists"

    async def test_rename_updates_slug(self, service, python_tag):
        updated = await service.update_tag(python_tag.id, TagUpdate(name="Python 3"))

        assert updated.name == "python 3"
        assert updated.slug == "python-3"

    async def test_search_and_counts(self, service, python_tag):
        await service.create_tag(TagCreate(name="sql"))
        await service.tag("post", 1, python_tag.id)
        await service.tag("user", 2, python_tag.id)

        tags, counts = await service.list_tags(search="pyt", include_counts=True)

        assert [t.name for t in tags] == ["python"]
        assert counts == {python_tag.id: 2}

    async def test_delete_in_use_requires_force(self, service, python_tag):
        await service.tag("post", 1, python_tag.id)

        with pytest.raises(ConflictException) as exc_info:
            await service.delete_tag(python_tag.id)

        assert exc_info.value.type == "tag-in-use"
        assert await service.delete_tag(python_tag.id, force=True) == 1
        with pytest.raises(NotFoundError):
            await service.get_tag(python_tag.id)


class TestTagging:
    """Tests for tagging owners."""

    async def test_tag_twice_keeps_one_link(self, service, python_tag):
        await service.tag(OwnerType.POST, 1, python_tag.id)
        await service.tag(OwnerType.POST, 1, python_tag.id)

        owners = await service.owners_of(python_tag.id)

        assert [(o.owner_type, o.owner_id) for o in owners] == [("post", "1")]

    async def test_unknown_owner_type(self, service, python_tag):
        with pytest.raises(InvalidOwnerTypeError):
            await service.tag("invoice", 1, python_tag.id)

    async def test_missing_tag(self, service):
        with pytest.raises(NotFoundError):
            await service.tag("post", 1, 404)

    async def test_untag(self, service, python_tag):
        await service.tag("post", 1, python_tag.id)

        assert await service.untag("post", 1, python_tag.id) is True
        assert await service.tags_for("post", 1) == []

    async def test_sync_replaces_and_orders(self, service, python_tag):
        sql = await service.create_tag(TagCreate(name="sql"))
        rust = await service.create_tag(TagCreate(name="rust"))
        await service.tag("post", 1, rust.id)

        tags = await service.sync_tags("post", 1, [sql.id, python_tag.id])

        assert [t.name for t in tags] == ["sql", "python"]

    async def test_sync_with_missing_tag(self, service, python_tag):
        with pytest.raises(NotFoundError) as exc_info:
            await service.sync_tags("post", 1, [python_tag.id, 404])

        assert exc_info.value.identifier == {"ids": [404]}
        assert await service.tags_for("post", 1) == []
