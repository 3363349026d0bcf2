from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.crud.order import create_order, get_orders, get_order_by_id
from restaurant_pos.crud.order import update_order, update_order_status, delete_order
from restaurant_pos.db.deps import get_async_session
from restaurant_pos.models.order import OrderStatusEnum
from restaurant_pos.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate, OrderUpdate


router = APIRouter(prefix="/orders", tags=["orders"])

@router.get("", response_model=List[OrderRead])
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает все заказы с позициями, новые первыми.
    Фронтенд опрашивает этот эндпоинт по таймеру.
    """
    orders = await get_orders(db, status=status)
    return [OrderRead.from_orm_with_name(o) for o in orders]


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int = Path(..., description="ID заказа"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает заказ по id.
    """
    order = await get_order_by_id(db, order_id)
    return OrderRead.from_orm_with_name(order)


@router.post("", response_model=OrderRead, status_code=201)
async def create_order_endpoint(order_in: OrderCreate, db: AsyncSession = Depends(get_async_session)):
    """
    Создаёт заказ. Пустой список позиций даёт 400.
    """
    return await create_order(db, order_in)


@router.put("/{order_id}", response_model=OrderRead)
async def update_order_endpoint(
    order_in: OrderUpdate,
    order_id: int = Path(..., description="ID заказа"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Полная замена заказа: table_number, status и весь список items.
    """
    return await update_order(db, order_id, order_in)


@router.put("/{order_id}/status", response_model=OrderRead)
async def update_order_status_endpoint(
    status_in: OrderStatusUpdate,
    order_id: int = Path(..., description="ID заказа"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Меняет только статус заказа.
    """
    return await update_order_status(db, order_id, status_in.status)


@router.delete("/{order_id}", status_code=204)
async def remove_order(order_id: int, db: AsyncSession = Depends(get_async_session)):
    """
    Удаляет заказ вместе с позициями.
    """
    await delete_order(db, order_id)
    return Response(status_code=204)
