"""Categories feature: a nested-set taxonomy for posts."""

from __future__ import annotations

from .models import Category
from .repository import CategoryRepository, get_category_repository
from .schemas import (
    CategoryBreadcrumb,
    CategoryCreate,
    CategoryMove,
    CategoryResponse,
    CategoryStats,
    CategoryUpdate,
    slugify,
)
from .service import CategoryService

__all__ = [
    "Category",
    "CategoryBreadcrumb",
    "CategoryCreate",
    "CategoryMove",
    "CategoryRepository",
    "CategoryResponse",
    "CategoryStats",
    "CategoryService",
    "CategoryUpdate",
    "get_category_repository",
    "slugify",
]
