"""create_orders_and_payments

Revision ID: 4c2e91a7b3d0
Revises:
Create Date: 2026-01-05 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c2e91a7b3d0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


id_type = sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def upgrade() -> None:
    op.create_table(
        'orders',
        sa.Column('id', id_type, autoincrement=True, nullable=False),
        sa.Column('external_ref', sa.String(length=64), nullable=False, comment='Caller-supplied unique reference'),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='created', comment='created/awaiting_payment/paid'),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_ref', name='uq_orders_external_ref'),
    )

    op.create_table(
        'payments',
        sa.Column('id', id_type, autoincrement=True, nullable=False),
        sa.Column('order_id', id_type, nullable=False),
        sa.Column('provider', sa.String(length=32), nullable=False, comment='point/pix'),
        sa.Column('provider_order_id', sa.String(length=64), nullable=True, comment='Mercado Pago order id'),
        sa.Column('provider_payment_id', sa.String(length=64), nullable=True, comment='Mercado Pago payment id'),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='created', comment='Provider status, stored verbatim'),
        sa.Column('terminal_id', sa.String(length=128), nullable=True, comment='Point terminal only'),
        sa.Column('raw_json', sa.JSON(), nullable=True, comment='Last provider response body'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_index('ix_payments_order_id', 'payments', ['order_id'], unique=False)
    op.create_index('ix_payments_provider_order_id', 'payments', ['provider_order_id'], unique=False)
    op.create_index('ix_payments_provider_payment_id', 'payments', ['provider_payment_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_payments_provider_payment_id', table_name='payments')
    op.drop_index('ix_payments_provider_order_id', table_name='payments')
    op.drop_index('ix_payments_order_id', table_name='payments')
    op.drop_table('payments')
    op.drop_table('orders')
