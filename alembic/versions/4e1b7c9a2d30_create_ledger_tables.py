"""Create ledger tables

Revision ID: 4e1b7c9a2d30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e1b7c9a2d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'stock_positions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('ticker', sa.String(length=20), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('cost_basis', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('open_date', sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'ticker', name='uq_stock_positions_owner_ticker'),
    )
    op.create_index(op.f('ix_stock_positions_owner_id'), 'stock_positions', ['owner_id'], unique=False)
    op.create_index(op.f('ix_stock_positions_ticker'), 'stock_positions', ['ticker'], unique=False)
    op.create_index(op.f('ix_stock_positions_open_date'), 'stock_positions', ['open_date'], unique=False)

    op.create_table(
        'option_positions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('ticker', sa.String(length=20), nullable=False),
        sa.Column('option_kind', sa.String(length=10), nullable=False),
        sa.Column('strike', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('premium', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('price', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=False),
        sa.Column('collateral', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_option_positions_owner_id'), 'option_positions', ['owner_id'], unique=False)
    op.create_index(op.f('ix_option_positions_ticker'), 'option_positions', ['ticker'], unique=False)
    op.create_index(op.f('ix_option_positions_option_kind'), 'option_positions', ['option_kind'], unique=False)
    op.create_index(op.f('ix_option_positions_expiration_date'), 'option_positions', ['expiration_date'], unique=False)
    op.create_index(op.f('ix_option_positions_purchase_date'), 'option_positions', ['purchase_date'], unique=False)

    op.create_table(
        'closed_stocks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('ticker', sa.String(length=20), nullable=False),
        sa.Column('open_date', sa.Date(), nullable=False),
        sa.Column('close_date', sa.Date(), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('cost_basis', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('sell_price', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('profit_loss', sa.Numeric(precision=18, scale=4), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_closed_stocks_owner_id'), 'closed_stocks', ['owner_id'], unique=False)
    op.create_index(op.f('ix_closed_stocks_ticker'), 'closed_stocks', ['ticker'], unique=False)
    op.create_index(op.f('ix_closed_stocks_close_date'), 'closed_stocks', ['close_date'], unique=False)

    op.create_table(
        'closed_options',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('ticker', sa.String(length=20), nullable=False),
        sa.Column('option_kind', sa.String(length=10), nullable=False),
        sa.Column('price', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('premium', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('strike', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=False),
        sa.Column('collateral', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        sa.Column('close_date', sa.Date(), nullable=False),
        sa.Column('sell_price', sa.Numeric(precision=28, scale=10), nullable=False),
        sa.Column('profit_loss', sa.Numeric(precision=18, scale=4), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_closed_options_owner_id'), 'closed_options', ['owner_id'], unique=False)
    op.create_index(op.f('ix_closed_options_ticker'), 'closed_options', ['ticker'], unique=False)
    op.create_index(op.f('ix_closed_options_option_kind'), 'closed_options', ['option_kind'], unique=False)
    op.create_index(op.f('ix_closed_options_close_date'), 'closed_options', ['close_date'], unique=False)


def downgrade() -> None:
    op.drop_table('closed_options')
    op.drop_table('closed_stocks')
    op.drop_table('option_positions')
    op.drop_table('stock_positions')
