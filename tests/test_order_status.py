import pytest

from restaurant_pos.crud import order as order_crud
from restaurant_pos.crud.order import check_transition
from restaurant_pos.exceptions import ConflictError
from restaurant_pos.models import OrderStatusEnum as S
from restaurant_pos.schemas.order import OrderCreate, OrderItemCreate, OrderUpdate


@pytest.mark.parametrize(
    "current, new",
    [
        (S.pending, S.preparing),
        (S.pending, S.cancelled),
        (S.preparing, S.ready),
        (S.preparing, S.cancelled),
        (S.ready, S.delivered),
        (S.ready, S.ready),
        (S.delivered, S.delivered),
    ],
)
def test_allowed_transitions(current, new):
    check_transition(current, new)


@pytest.mark.parametrize(
    "current, new",
    [
        (S.pending, S.ready),
        (S.pending, S.delivered),
        (S.preparing, S.pending),
        (S.ready, S.cancelled),
        (S.delivered, S.pending),
        (S.cancelled, S.preparing),
    ],
)
def test_rejected_transitions(current, new):
    with pytest.raises(ConflictError):
        check_transition(current, new)


async def test_illegal_status_change_leaves_order_untouched(session_factory, menu):
    async with session_factory() as db:
        order = await order_crud.create_order(
            db, OrderCreate(table_number=2, items=[OrderItemCreate(menu_item_id=menu["fries"].id, quantity=1)])
        )

    async with session_factory() as db:
        with pytest.raises(ConflictError):
            await order_crud.update_order_status(db, order.id, S.delivered)

    async with session_factory() as db:
        with pytest.raises(ConflictError):
            await order_crud.update_order(
                db,
                order.id,
                OrderUpdate(
                    table_number=5,
                    status=S.ready,
                    items=[OrderItemCreate(menu_item_id=menu["burger"].id, quantity=1)],
                ),
            )

    async with session_factory() as db:
        stored = await order_crud.get_order_by_id(db, order.id)
    assert stored.status == S.pending
    assert stored.table_number == 2
    assert [i.menu_item_id for i in stored.items] == [menu["fries"].id]


async def test_walks_full_lifecycle(session_factory, menu):
    async with session_factory() as db:
        order = await order_crud.create_order(
            db, OrderCreate(table_number=1, items=[OrderItemCreate(menu_item_id=menu["burger"].id, quantity=1)])
        )

    for status in (S.preparing, S.ready, S.delivered):
        async with session_factory() as db:
            order = await order_crud.update_order_status(db, order.id, status)
        assert order.status == status
