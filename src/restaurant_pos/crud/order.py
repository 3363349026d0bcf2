import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant_pos.db.session import storage_errors, transaction
from restaurant_pos.exceptions import ConflictError, NotFoundError, ValidationError
from restaurant_pos.models import Order, OrderItem, MenuItem, OrderStatusEnum
from restaurant_pos.schemas.order import MAX_QUANTITY, MAX_TOTAL, OrderCreate, OrderItemCreate, OrderRead, OrderUpdate
from restaurant_pos.schemas.order import order_total

logger = logging.getLogger(__name__)


# Допустимые переходы статуса. delivered и cancelled конечные.
ALLOWED_TRANSITIONS: Dict[OrderStatusEnum, set] = {
    OrderStatusEnum.pending: {OrderStatusEnum.preparing, OrderStatusEnum.cancelled},
    OrderStatusEnum.preparing: {OrderStatusEnum.ready, OrderStatusEnum.cancelled},
    OrderStatusEnum.ready: {OrderStatusEnum.delivered},
    OrderStatusEnum.delivered: set(),
    OrderStatusEnum.cancelled: set(),
}


def check_transition(current: OrderStatusEnum, new: OrderStatusEnum) -> None:
    """
    Проверяет смену статуса. Повторная установка того же статуса разрешена.
    """
    if new == current or new in ALLOWED_TRANSITIONS[current]:
        return
    raise ConflictError(f"Cannot change order status from {current.value} to {new.value}")


def _require_items(items: Optional[List[OrderItemCreate]]) -> None:
    if not items:
        raise ValidationError("Order must include at least one item")


def _merge_lines(items: Iterable[OrderItemCreate]) -> Dict[int, OrderItemCreate]:
    """
    Сводит повторяющиеся позиции одного блюда в одну строку.
    Порядок первых вхождений сохраняется.
    """
    merged: Dict[int, OrderItemCreate] = {}
    for item in items:
        if item.menu_item_id in merged:
            prev = merged[item.menu_item_id]
            merged[item.menu_item_id] = prev.model_copy(update={"quantity": prev.quantity + item.quantity})
        else:
            merged[item.menu_item_id] = item

    for menu_item_id, line in merged.items():
        if line.quantity > MAX_QUANTITY:
            raise ValidationError(f"Quantity for menu item with id={menu_item_id} exceeds {MAX_QUANTITY}")
    return merged


def _checked_total(items: List[OrderItem]) -> Decimal:
    # total_amount хранится в Numeric(10, 2)
    total = order_total(items)
    if total > MAX_TOTAL:
        raise ValidationError(f"Order total {total} exceeds {MAX_TOTAL}")
    return total


def _order_query():
    # populate_existing: позиции в identity map могли устареть после замены
    return (
        select(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
        .execution_options(populate_existing=True)
    )


async def _fetch_order(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(_order_query().where(Order.id == order_id))
    return result.scalars().unique().one()


async def _lock_order(db: AsyncSession, order_id: int) -> Order:
    """
    Читает заголовок заказа с блокировкой строки (где диалект это умеет).
    """
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    order = result.scalars().first()
    if not order:
        raise NotFoundError(f"Order with id={order_id} not found")
    return order


async def _price_lines(
    db: AsyncSession,
    lines: Dict[int, OrderItemCreate],
    kept_prices: Optional[Dict[int, Decimal]] = None,
) -> List[OrderItem]:
    """
    Строит позиции заказа с ценой на момент заказа.

    Цена берётся из меню; для блюд, которые уже были в заказе,
    сохраняется прежняя зафиксированная цена. Цена, присланная клиентом,
    только сверяется.
    """
    kept_prices = kept_prices or {}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(list(lines))))
    menu = {m.id: m for m in result.scalars()}

    priced = []
    for menu_item_id, line in lines.items():
        menu_item = menu.get(menu_item_id)
        if menu_item is None:
            raise ValidationError(f"Menu item with id={menu_item_id} not found")

        if menu_item_id in kept_prices:
            price = kept_prices[menu_item_id]
        elif not menu_item.is_available:
            raise ValidationError(f"Menu item '{menu_item.name}' is not available")
        else:
            price = menu_item.price

        if line.price is not None and Decimal(line.price) != Decimal(price):
            logger.warning(
                "Client price %s for menu item %s ignored, using %s",
                line.price, menu_item_id, price,
            )

        priced.append(OrderItem(menu_item_id=menu_item_id, quantity=line.quantity, price=price))
    return priced


async def _insert_items(db: AsyncSession, order_id: int, items: List[OrderItem]) -> None:
    for item in items:
        item.order_id = order_id
    db.add_all(items)
    await db.flush()


async def get_orders(db: AsyncSession, status: Optional[OrderStatusEnum] = None) -> List[Order]:
    """
    Возвращает все заказы с позициями, новые первыми.
    Без пагинации: объём одного ресторана.
    """
    stmt = _order_query().order_by(Order.created_at.desc(), Order.id.desc())
    if status:
        stmt = stmt.where(Order.status == status)

    async with storage_errors("list orders"):
        result = await db.execute(stmt)
        return result.scalars().unique().all()


async def get_order_by_id(db: AsyncSession, order_id: int) -> Order:
    async with storage_errors("load order"):
        result = await db.execute(_order_query().where(Order.id == order_id))
        order = result.scalars().unique().first()
    if not order:
        raise NotFoundError(f"Order with id={order_id} not found")
    return order


async def create_order(db: AsyncSession, order_in: OrderCreate) -> OrderRead:
    """
    Создаёт заказ и его позиции одной транзакцией.
    Статус всегда pending, сумма считается по зафиксированным ценам.
    """
    _require_items(order_in.items)
    lines = _merge_lines(order_in.items)

    async with transaction(db, "create order"):
        items = await _price_lines(db, lines)

        order = Order(
            table_number=order_in.table_number,
            status=OrderStatusEnum.pending,
            total_amount=_checked_total(items),
        )
        db.add(order)
        await db.flush()

        await _insert_items(db, order.id, items)
        order = await _fetch_order(db, order.id)

    logger.info("Order %s created for table %s, total %s", order.id, order.table_number, order.total_amount)
    return OrderRead.from_orm_with_name(order)


async def update_order(db: AsyncSession, order_id: int, order_in: OrderUpdate) -> OrderRead:
    """
    Полная замена заказа: стол, статус и весь набор позиций.
    Старые позиции удаляются, новые вставляются в той же транзакции.
    """
    _require_items(order_in.items)
    lines = _merge_lines(order_in.items)

    async with transaction(db, "update order"):
        order = await _lock_order(db, order_id)
        if order_in.status is not None:
            check_transition(order.status, order_in.status)

        result = await db.execute(
            select(OrderItem.menu_item_id, OrderItem.price).where(OrderItem.order_id == order_id)
        )
        kept_prices = {row.menu_item_id: row.price for row in result}
        items = await _price_lines(db, lines, kept_prices)
        total = _checked_total(items)

        await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
        await _insert_items(db, order_id, items)

        order.table_number = order_in.table_number
        if order_in.status is not None:
            order.status = order_in.status
        order.total_amount = total
        await db.flush()

        order = await _fetch_order(db, order_id)

    logger.info("Order %s replaced: %s item(s), total %s", order.id, len(order.items), order.total_amount)
    return OrderRead.from_orm_with_name(order)


async def update_order_status(db: AsyncSession, order_id: int, status: OrderStatusEnum) -> OrderRead:
    """
    Меняет только статус. Позиции и сумма не трогаются.
    """
    async with transaction(db, "update order status"):
        order = await _lock_order(db, order_id)
        previous = order.status
        check_transition(previous, status)

        order.status = status
        await db.flush()
        order = await _fetch_order(db, order_id)

    logger.info("Order %s status %s -> %s", order_id, previous.value, status.value)
    return OrderRead.from_orm_with_name(order)


async def delete_order(db: AsyncSession, order_id: int) -> None:
    """
    Удаляет позиции, затем сам заказ. Если заказа нет, откатываемся.
    """
    async with transaction(db, "delete order"):
        await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
        result = await db.execute(delete(Order).where(Order.id == order_id))
        if result.rowcount == 0:
            raise NotFoundError(f"Order with id={order_id} not found")

    logger.info("Order %s deleted", order_id)
