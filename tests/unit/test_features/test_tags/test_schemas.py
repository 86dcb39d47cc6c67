"""Unit tests for tag schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from content_service.core.database import OwnerType
from content_service.features.tags.models import TagType
from content_service.features.tags.schemas import TagCreate, TaggingRequest, TagUpdate


class TestTagCreate:
    """Tests for TagCreate schema."""

    def test_name_normalization(self):
        """Tag names should be lowercased and trimmed."""
        tag = TagCreate(name="  WORK  ")

        assert tag.name == "work"
        assert tag.type is TagType.GENERAL
        assert tag.color is None

    def test_invalid_color_format(self):
        """Invalid color format should raise validation error."""
        with pytest.raises(ValidationError) as exc_info:
            TagCreate(name="test", color="red")

        assert "color" in str(exc_info.value).lower()

    def test_name_too_long(self):
        with pytest.raises(ValidationError):
            TagCreate(name="x" * 51)


class TestTagUpdate:
    """Tests for TagUpdate schema."""

    def test_partial_update(self):
        update = TagUpdate(color="#123ABC")

        assert update.name is None
        assert update.color == "#123ABC"

    def test_name_normalized_when_given(self):
        assert TagUpdate(name=" Python ").name == "python"


class TestTaggingRequest:
    """Tests for TaggingRequest schema."""

    def test_owner_type_is_enumerated(self):
        request = TaggingRequest(owner_type="post", owner_id="7", tag_ids=[1, 2])

        assert request.owner_type is OwnerType.POST
        assert request.group == "default"

    def test_unknown_owner_type(self):
        with pytest.raises(ValidationError):
            TaggingRequest(owner_type="invoice", owner_id="7", tag_ids=[1])

    def test_needs_tags(self):
        with pytest.raises(ValidationError):
            TaggingRequest(owner_type="post", owner_id="7", tag_ids=[])
