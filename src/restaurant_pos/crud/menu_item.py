import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.db.session import storage_errors, transaction
from restaurant_pos.exceptions import ConflictError, NotFoundError
from restaurant_pos.models import MenuItem, OrderItem
from restaurant_pos.schemas.menu_item import MenuItemCreate, MenuItemUpdate

logger = logging.getLogger(__name__)


async def get_menu_items(db: AsyncSession, available: Optional[bool] = None) -> List[MenuItem]:
    """
    Возвращает меню, отсортированное по категории и названию.
    """
    stmt = select(MenuItem).order_by(MenuItem.category, MenuItem.name)
    if available is not None:
        stmt = stmt.where(MenuItem.is_available == available)

    async with storage_errors("list menu items"):
        result = await db.execute(stmt)
        return result.scalars().all()


async def get_menu_item(db: AsyncSession, menu_item_id: int) -> MenuItem:
    async with storage_errors("load menu item"):
        item = await db.get(MenuItem, menu_item_id)
    if not item:
        raise NotFoundError(f"Menu item with id={menu_item_id} not found")
    return item


async def create_menu_item(db: AsyncSession, item_in: MenuItemCreate) -> MenuItem:
    async with transaction(db, "create menu item"):
        item = MenuItem(**item_in.model_dump())
        db.add(item)
        await db.flush()
        await db.refresh(item)

    logger.info("Menu item %s '%s' created", item.id, item.name)
    return item


async def update_menu_item(db: AsyncSession, menu_item_id: int, item_in: MenuItemUpdate) -> MenuItem:
    """
    Обновляет только переданные поля. Цены в уже созданных заказах
    не меняются, они зафиксированы в order_items.
    """
    update_data = item_in.model_dump(exclude_unset=True)

    async with transaction(db, "update menu item"):
        item = await get_menu_item(db, menu_item_id)
        for key, value in update_data.items():
            setattr(item, key, value)
        await db.flush()
        await db.refresh(item)

    logger.info("Menu item %s updated: %s", menu_item_id, ", ".join(sorted(update_data)) or "no changes")
    return item


async def delete_menu_item(db: AsyncSession, menu_item_id: int) -> None:
    """
    Удаляет блюдо. Если оно есть хотя бы в одном заказе, удаление
    запрещено (ConflictError), история заказов остаётся целой.
    """
    async with transaction(db, "delete menu item"):
        item = await get_menu_item(db, menu_item_id)

        used = await db.scalar(
            select(func.count()).select_from(OrderItem).where(OrderItem.menu_item_id == menu_item_id)
        )
        if used:
            raise ConflictError(f"Menu item with id={menu_item_id} is used in {used} order item(s)")

        await db.delete(item)
        try:
            await db.flush()
        except IntegrityError as exc:
            # позиция появилась между проверкой и удалением
            raise ConflictError(f"Menu item with id={menu_item_id} is used in existing orders") from exc

    logger.info("Menu item %s deleted", menu_item_id)
