"""Unit tests for category schemas and slug generation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from content_service.features.categories.schemas import CategoryCreate, CategoryUpdate, slugify


class TestSlugify:
    """Tests for slugify."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("News", "news"),
            ("Machine Learning & AI", "machine-learning-ai"),
            ("  snake_case  name ", "snake-case-name"),
            ("--Already--slugged--", "already-slugged"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, value, expected):
        assert slugify(value) == expected


class TestCategoryCreate:
    """Tests for CategoryCreate."""

    def test_name_is_trimmed(self):
        assert CategoryCreate(name="  World ").name == "World"

    def test_invalid_slug(self):
        with pytest.raises(ValidationError):
            CategoryCreate(name="World", slug="Not A Slug")

    def test_update_tracks_explicit_null_parent(self):
        """An explicit null parent means "move to root"; omission means "stay"."""
        assert "parent_id" in CategoryUpdate(parent_id=None).model_fields_set
        assert "parent_id" not in CategoryUpdate(name="World").model_fields_set
