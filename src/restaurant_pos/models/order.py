import enum
from sqlalchemy import Column, Integer, Numeric, DateTime, CheckConstraint, Enum as SAEnum, func
from sqlalchemy.orm import relationship
from ..db.base import Base


class OrderStatusEnum(str, enum.Enum):
    pending = "pending"
    preparing = "preparing"
    ready = "ready"
    delivered = "delivered"
    cancelled = "cancelled"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("table_number > 0", name="ck_orders_table_number_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    table_number = Column(Integer, nullable=False)
    status = Column(
        SAEnum(OrderStatusEnum, name="order_status"),
        nullable=False,
        default=OrderStatusEnum.pending,
    )
    total_amount = Column(Numeric(10, 2), nullable=False)  # всегда считается сервером
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # позиции принадлежат только этому заказу
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.id",
    )
