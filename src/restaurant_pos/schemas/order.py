from pydantic import AliasChoices, BaseModel, Field, conint, condecimal
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from restaurant_pos.models.order import OrderStatusEnum
from .money import Money, quantize_money

# ограничения ввода; total_amount хранится в Numeric(10, 2)
MAX_QUANTITY = 1000
MAX_TABLE_NUMBER = 10_000
MAX_TOTAL = Decimal("99999999.99")


class OrderItemRead(BaseModel):
    id: int
    menu_item_id: int
    name: str | None = None
    quantity: int
    price: Money

    @classmethod
    def from_orm_with_name(cls, item):
        return cls(
            id=item.id,
            menu_item_id=item.menu_item_id,
            name=item.menu_item.name if item.menu_item else None,
            quantity=item.quantity,
            price=item.price,
        )

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    table_number: int
    status: OrderStatusEnum
    total_amount: Money
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = []

    @classmethod
    def from_orm_with_name(cls, order):
        return cls(
            id=order.id,
            table_number=order.table_number,
            status=order.status,
            total_amount=quantize_money(order.total_amount),
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemRead.from_orm_with_name(i) for i in order.items],
        )

    class Config:
        from_attributes = True


class OrderItemCreate(BaseModel):
    # старый фронтенд присылает id блюда в поле "id"
    menu_item_id: int = Field(validation_alias=AliasChoices("menu_item_id", "id"))
    quantity: conint(ge=1, le=MAX_QUANTITY)
    # цена от клиента не используется, сервер берёт её из меню
    price: Optional[condecimal(gt=0)] = None


class OrderCreate(BaseModel):
    table_number: conint(ge=1, le=MAX_TABLE_NUMBER)
    items: List[OrderItemCreate] = []


class OrderUpdate(OrderCreate):
    status: Optional[OrderStatusEnum] = None  # None: оставить текущий


class OrderStatusUpdate(BaseModel):
    status: OrderStatusEnum


def order_total(lines) -> Decimal:
    """Сумма price * quantity по позициям, округлённая до копеек."""
    return quantize_money(sum((line.price * line.quantity for line in lines), Decimal("0")))
