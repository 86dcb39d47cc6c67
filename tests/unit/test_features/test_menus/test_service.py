"""Unit tests for MenuService."""

from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import select

from content_service.core.database import CircularReferenceError, HasChildrenError, InvalidParentError
from content_service.core.exceptions import ConflictException
from content_service.features.menus.models import Menu
from content_service.features.menus.schemas import MenuCreate, MenuUpdate
from content_service.features.menus.service import MenuService


@pytest.fixture
def service(db_session) -> MenuService:
    return MenuService(db_session)


@pytest.fixture
async def navigation(service: MenuService):
    """Home, Products (Software, Hardware), About."""
    home = await service.create_menu(MenuCreate(name="Home", url="/"))
    products = await service.create_menu(MenuCreate(name="Products"))
    software = await service.create_menu(MenuCreate(name="Software", parent_id=products.id))
    hardware = await service.create_menu(MenuCreate(name="Hardware", parent_id=products.id))
    about = await service.create_menu(MenuCreate(name="About", url="/about"))
    return {"home": home, "products": products, "software": software, "hardware": hardware, "about": about}


class TestCreateMenu:
    """Tests for MenuService.create_menu."""

    async def test_client_supplied_id(self, service):
        menu_id = uuid4()

        menu = await service.create_menu(MenuCreate(id=menu_id, name=" Docs "))

        assert menu.id == menu_id
        assert menu.name == "Docs"

    async def test_generated_id(self, service):
        menu = await service.create_menu(MenuCreate(name="Docs"))

        assert menu.id is not None

    async def test_self_parent(self, service):
        menu_id = uuid4()

        with pytest.raises(CircularReferenceError):
            await service.create_menu(MenuCreate(id=menu_id, name="Loop", parent_id=menu_id))

    async def test_duplicate_id(self, service):
        menu_id = uuid4()
        await service.create_menu(MenuCreate(id=menu_id, name="Docs"))

        with pytest.raises(ConflictException) as exc_info:
            await service.create_menu(MenuCreate(id=menu_id, name="Docs again"))

        assert exc_info.value.type == "menu-id-exists"

    async def test_unknown_parent(self, service):
        with pytest.raises(InvalidParentError):
            await service.create_menu(MenuCreate(name="Orphan", parent_id=uuid4()))


class TestMenuTree:
    """Tests for nested menu reads."""

    async def test_tree_nests_children(self, service, navigation):
        tree = await service.get_menu_tree()

        assert [m.name for m in tree] == ["Home", "Products", "About"]
        assert [c.name for c in tree[1].children] == ["Software", "Hardware"]
        assert tree[1].children[0].depth == 1

    async def test_inactive_entry_hides_subtree(self, service, navigation):
        await service.update_menu(navigation["products"].id, MenuUpdate(is_active=False))

        tree = await service.get_menu_tree(active_only=True)

        assert [m.name for m in tree] == ["Home", "About"]

    async def test_inactive_leaf_only_hides_itself(self, service, navigation):
        await service.update_menu(navigation["software"].id, MenuUpdate(is_active=False))

        tree = await service.get_menu_tree(active_only=True)

        assert [c.name for c in tree[1].children] == ["Hardware"]

    async def test_roots(self, service, navigation):
        await service.update_menu(navigation["about"].id, MenuUpdate(is_active=False))

        roots = await service.get_roots(active_only=True)

        assert [m.name for m in roots] == ["Home", "Products"]


class TestRestructure:
    """Tests for moving and deleting entries."""

    async def test_move_via_update(self, service, navigation):
        moved = await service.update_menu(
            navigation["about"].id, MenuUpdate(parent_id=navigation["home"].id)
        )

        assert moved.parent_id == navigation["home"].id
        assert [m.name for m in await service.get_children(navigation["home"].id)] == ["About"]

    async def test_rejected_move_keeps_fields(self, db_session, service, navigation):
        products = navigation["products"]

        with pytest.raises(CircularReferenceError):
            await service.update_menu(
                products.id,
                MenuUpdate(name="Catalogue", icon="box", parent_id=navigation["software"].id),
            )

        stored = await db_session.execute(
            select(Menu.name, Menu.icon, Menu.left, Menu.right).where(Menu.id == products.id)
        )
        assert stored.one() == ("Products", None, 3, 8)

    async def test_unknown_parent_keeps_fields(self, db_session, service, navigation):
        about = navigation["about"]

        with pytest.raises(InvalidParentError):
            await service.update_menu(about.id, MenuUpdate(name="Company", parent_id=uuid4()))

        stored = await db_session.execute(select(Menu.name).where(Menu.id == about.id))
        assert stored.scalar_one() == "About"

    async def test_move_under_child(self, service, navigation):
        with pytest.raises(CircularReferenceError):
            await service.move_menu(navigation["products"].id, navigation["hardware"].id)

    async def test_delete(self, service, navigation):
        with pytest.raises(HasChildrenError):
            await service.delete_menu(navigation["products"].id)

        assert await service.delete_menu(navigation["products"].id, cascade=True) == 3
        assert [m.name for m in await service.get_menu_tree()] == ["Home", "About"]
