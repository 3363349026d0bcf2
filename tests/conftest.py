import os

# get_settings() требует DATABASE_URL; тесты передают Settings явно
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

import restaurant_pos.models  # noqa: F401
from restaurant_pos.config import Settings
from restaurant_pos.crud.menu_item import create_menu_item
from restaurant_pos.db.base import Base
from restaurant_pos.main import create_app
from restaurant_pos.schemas.menu_item import MenuItemCreate


@pytest.fixture
def settings(tmp_path):
    return Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'pos.db'}", LOG_LEVEL="DEBUG")


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
def session_factory(app):
    return app.state.sessionmaker


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def menu(session_factory):
    items = {}
    async with session_factory() as db:
        items["burger"] = await create_menu_item(
            db, MenuItemCreate(name="Burger", price=Decimal("12.50"), category="Mains")
        )
        items["fries"] = await create_menu_item(
            db, MenuItemCreate(name="Fries", price=Decimal("4.00"), category="Sides")
        )
        items["lemonade"] = await create_menu_item(
            db, MenuItemCreate(name="Lemonade", price=Decimal("3.25"), category="Drinks")
        )
        items["soup"] = await create_menu_item(
            db, MenuItemCreate(name="Soup of the day", price=Decimal("6.00"), category="Mains", is_available=False)
        )
    return items
