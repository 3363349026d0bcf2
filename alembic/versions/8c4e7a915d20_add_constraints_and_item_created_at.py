"""add check constraints and order_items.created_at

Revision ID: 8c4e7a915d20
Revises: 3a1f0c2d9b7e
Create Date: 2026-10-02 21:07:53.619032

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8c4e7a915d20'
down_revision: Union[str, Sequence[str], None] = '3a1f0c2d9b7e'
branch_labels = None
depends_on = None


# batch_alter_table: на PostgreSQL обычные ALTER, на SQLite пересоздание таблицы
def upgrade() -> None:
    # цены и количества только положительные
    with op.batch_alter_table('menu_items') as batch:
        batch.create_check_constraint('ck_menu_items_price_positive', 'price > 0')

    with op.batch_alter_table('orders') as batch:
        batch.create_check_constraint('ck_orders_table_number_positive', 'table_number > 0')

    with op.batch_alter_table('order_items') as batch:
        batch.add_column(
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        )
        batch.create_check_constraint('ck_order_items_quantity_positive', 'quantity > 0')
        batch.create_check_constraint('ck_order_items_price_positive', 'price > 0')


def downgrade() -> None:
    with op.batch_alter_table('order_items') as batch:
        batch.drop_constraint('ck_order_items_price_positive', type_='check')
        batch.drop_constraint('ck_order_items_quantity_positive', type_='check')
        batch.drop_column('created_at')

    with op.batch_alter_table('orders') as batch:
        batch.drop_constraint('ck_orders_table_number_positive', type_='check')

    with op.batch_alter_table('menu_items') as batch:
        batch.drop_constraint('ck_menu_items_price_positive', type_='check')
