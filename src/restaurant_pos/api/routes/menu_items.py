from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.crud.menu_item import create_menu_item, get_menu_items, get_menu_item
from restaurant_pos.crud.menu_item import update_menu_item, delete_menu_item
from restaurant_pos.db.deps import get_async_session
from restaurant_pos.schemas.menu_item import MenuItemCreate, MenuItemRead, MenuItemUpdate


router = APIRouter(prefix="/menu-items", tags=["menu"])

@router.get("", response_model=List[MenuItemRead])
async def list_menu_items(
    available: Optional[bool] = Query(None, description="Только доступные / недоступные"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Меню, отсортированное по категории и названию.
    """
    return await get_menu_items(db, available=available)


@router.get("/{menu_item_id}", response_model=MenuItemRead)
async def get_menu_item_endpoint(
    menu_item_id: int = Path(..., description="ID блюда"),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_menu_item(db, menu_item_id)


@router.post("", response_model=MenuItemRead, status_code=201)
async def create_menu_item_endpoint(item_in: MenuItemCreate, db: AsyncSession = Depends(get_async_session)):
    return await create_menu_item(db, item_in)


@router.put("/{menu_item_id}", response_model=MenuItemRead)
async def update_menu_item_endpoint(
    item_in: MenuItemUpdate,
    menu_item_id: int = Path(..., description="ID блюда"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Обновляет переданные поля блюда.
    """
    return await update_menu_item(db, menu_item_id, item_in)


@router.delete("/{menu_item_id}", status_code=204)
async def remove_menu_item(menu_item_id: int, db: AsyncSession = Depends(get_async_session)):
    """
    Удаляет блюдо. 409, если оно есть в заказах.
    """
    await delete_menu_item(db, menu_item_id)
    return Response(status_code=204)
