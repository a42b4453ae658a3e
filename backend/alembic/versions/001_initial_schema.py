"""Initial schema

This migration creates the complete database schema for the tin desk
valuation service.

Tables:
    - trades: Executed tin trades (read by the valuation engine)
    - futures_curve: Reference futures prices per as-of date and tenor
    - monthly_pnl: Month-end valuations, one per year-month
    - daily_pnl: Daily valuations, one per valuation date

Revision ID: 001
Revises: None
Create Date: 2026-03-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # TRADES
    # ==========================================================================
    op.create_table(
        'trades',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('trade_date', sa.Date(), nullable=False),
        sa.Column('contract_month', sa.String(8), nullable=False, index=True),
        sa.Column('buy_sell', sa.Enum('BUY', 'SELL', name='tradedirection'), nullable=False),
        sa.Column('quantity_mt', sa.Numeric(18, 4), nullable=False),
        sa.Column('price_usd', sa.Numeric(18, 4), nullable=False),
        sa.Column('counterparty', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity_mt > 0', name='ck_trade_quantity_positive'),
        sa.CheckConstraint('price_usd > 0', name='ck_trade_price_positive'),
    )
    op.create_index('ix_trade_date_id', 'trades', ['trade_date', 'id'])

    # ==========================================================================
    # FUTURES CURVE
    # ==========================================================================
    op.create_table(
        'futures_curve',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('as_of_date', sa.Date(), nullable=False, index=True),
        sa.Column('tenor_months', sa.Integer(), nullable=False),
        sa.Column('futures_price_usd', sa.Numeric(18, 4), nullable=False),
        sa.Column('price_source', sa.String(50), nullable=False, server_default='LME'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('as_of_date', 'tenor_months', name='uq_curve_date_tenor'),
        sa.CheckConstraint('tenor_months >= 0', name='ck_curve_tenor_non_negative'),
    )

    # ==========================================================================
    # MONTHLY PNL
    # ==========================================================================
    op.create_table(
        'monthly_pnl',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('valuation_date', sa.Date(), nullable=False),
        sa.Column('year_month', sa.String(7), nullable=False),
        sa.Column('unrealized_pnl', sa.Numeric(18, 2), nullable=False),
        sa.Column('reversal_pnl', sa.Numeric(18, 2), nullable=True),
        sa.Column('net_pnl', sa.Numeric(18, 2), nullable=False),
        sa.Column('position_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('year_month', name='uq_monthly_pnl_year_month'),
    )
    op.create_index(
        'ix_monthly_pnl_year_month_date',
        'monthly_pnl',
        ['year_month', 'valuation_date'],
    )

    # ==========================================================================
    # DAILY PNL
    # ==========================================================================
    op.create_table(
        'daily_pnl',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('valuation_date', sa.Date(), nullable=False, index=True),
        sa.Column('realized_pnl', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('unrealized_pnl', sa.Numeric(18, 2), nullable=False),
        sa.Column('total_pnl', sa.Numeric(18, 2), nullable=False),
        sa.Column('position_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('valuation_date', name='uq_daily_pnl_valuation_date'),
    )


def downgrade() -> None:
    op.drop_table('daily_pnl')
    op.drop_index('ix_monthly_pnl_year_month_date', table_name='monthly_pnl')
    op.drop_table('monthly_pnl')
    op.drop_table('futures_curve')
    op.drop_index('ix_trade_date_id', table_name='trades')
    op.drop_table('trades')

    # Drop enums
    op.execute('DROP TYPE IF EXISTS tradedirection')
