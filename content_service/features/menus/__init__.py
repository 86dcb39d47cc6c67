"""Menus feature: nested navigation entries with client-suppliable UUIDs."""

from __future__ import annotations

from .models import Menu
from .repository import MenuRepository, get_menu_repository
from .schemas import MenuCreate, MenuResponse, MenuTreeResponse, MenuUpdate, build_menu_tree
from .service import MenuService

__all__ = [
    "Menu",
    "MenuCreate",
    "MenuRepository",
    "MenuResponse",
    "MenuService",
    "MenuTreeResponse",
    "MenuUpdate",
    "build_menu_tree",
    "get_menu_repository",
]
