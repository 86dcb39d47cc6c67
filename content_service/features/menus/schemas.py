"""Pydantic schemas for the menus feature."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_service.core.schemas import TreeNodeResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

    from content_service.features.menus.models import Menu


class MenuBase(BaseModel):
    """Shared attributes for menu payloads."""

    name: str = Field(..., min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=100)
    url: str | None = Field(default=None, max_length=500)
    is_active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class MenuCreate(MenuBase):
    """Payload used when creating a menu entry.

    ``id`` may be supplied by the client; it is generated otherwise.
    """

    id: UUID | None = None
    parent_id: UUID | None = None


class MenuUpdate(BaseModel):
    """Payload for updating a menu entry.

    Sending ``parent_id`` (including null) moves the entry.
    """

    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=100)
    url: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None
    parent_id: UUID | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class MenuResponse(TreeNodeResponse, MenuBase):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    parent_id: UUID | None = None


class MenuTreeResponse(MenuResponse):
    """Menu entry with its nested sub-entries."""

    children: list[MenuTreeResponse] = Field(default_factory=list)


def build_menu_tree(nodes: Iterable[Menu]) -> list[MenuTreeResponse]:
    """Nest a pre-ordered menu listing.

    Args:
        nodes: Menu entries sorted by left bound (as returned by get_tree)

    Returns:
        Root entries, each carrying its children recursively
    """
    by_id: dict[UUID, MenuTreeResponse] = {}
    roots: list[MenuTreeResponse] = []
    for node in nodes:
        item = MenuTreeResponse.model_validate(node)
        by_id[item.id] = item
        parent = by_id.get(item.parent_id) if item.parent_id is not None else None
        if parent is None:
            roots.append(item)
        else:
            parent.children.append(item)
    return roots


__all__ = [
    "MenuBase",
    "MenuCreate",
    "MenuResponse",
    "MenuTreeResponse",
    "MenuUpdate",
    "build_menu_tree",
]
