"""Unit tests for ContentService."""

from __future__ import annotations

import pytest

from content_service.core.database import InvalidOwnerTypeError, NotFoundError
from content_service.features.contents.models import ContentType
from content_service.features.contents.schemas import ContentCreate, ContentUpdate
from content_service.features.contents.service import ContentService


@pytest.fixture
def service(db_session) -> ContentService:
    return ContentService(db_session)


class TestContentService:
    """Tests for content blocks."""

    async def test_blocks_are_appended(self, service):
        first = await service.add_content("post", 1, ContentCreate(body="intro"))
        second = await service.add_content("post", 1, ContentCreate(body="outro"))

        assert (first.sort_order, second.sort_order) == (0, 1)
        assert first.group == "default"
        assert first.content_type == ContentType.TEXT

    async def test_media_can_own_content(self, service):
        block = await service.add_content(
            "media", 3, ContentCreate(body="<p>caption</p>", content_type=ContentType.HTML)
        )

        assert block.owner_type == "media"
        assert block.owner_id == "3"

    async def test_unknown_owner(self, service):
        with pytest.raises(InvalidOwnerTypeError):
            await service.add_content("invoice", 1, ContentCreate(body="x"))

    async def test_groups_are_separate(self, service):
        await service.add_content("post", 1, ContentCreate(body="a", group="Sidebar"))
        await service.add_content("post", 1, ContentCreate(body="b"))

        sidebar = await service.list_contents("post", 1, group="sidebar")

        assert [b.body for b in sidebar] == ["a"]
        assert sidebar[0].sort_order == 0

    async def test_update_and_remove(self, service):
        block = await service.add_content("user", 2, ContentCreate(body="bio"))

        updated = await service.update_content(
            block.id, ContentUpdate(body="# Bio", content_type=ContentType.MARKDOWN)
        )
        assert updated.body == "# Bio"
        assert updated.content_type == ContentType.MARKDOWN

        await service.remove_content(block.id)
        with pytest.raises(NotFoundError):
            await service.get_content(block.id)

    async def test_reorder(self, service):
        a = await service.add_content("post", 1, ContentCreate(body="a"))
        b = await service.add_content("post", 1, ContentCreate(body="b"))

        assert await service.reorder("post", 1, [b.id, a.id]) == 2
        assert [x.body for x in await service.list_contents("post", 1)] == ["b", "a"]
