# backend/tindesk/services/valuation/repository.py
"""
SQLAlchemy storage boundary for the valuation engine.

Every method takes the caller's Session; the repository holds no connection
state of its own. Inserts only add and flush, the service owns the commit so
that a run is one transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tindesk.models import Trade, FuturesCurvePoint, MonthlyPnL, DailyPnL
from tindesk.services.valuation.periods import ContractMonth, YearMonth
from tindesk.services.valuation.types import TradeRecord

logger = logging.getLogger(__name__)


def is_unique_constraint_violation(integrity_error: IntegrityError) -> bool:
    """
    Check if an IntegrityError is caused by a unique constraint violation.

    Args:
        integrity_error: The SQLAlchemy IntegrityError to check

    Returns:
        True if this is a unique constraint violation, False otherwise
    """
    # PostgreSQL error code 23505 = unique_violation
    if hasattr(integrity_error.orig, "pgcode"):
        return integrity_error.orig.pgcode == "23505"
    # SQLite: "UNIQUE constraint failed: monthly_pnl.year_month"
    return "unique constraint" in str(integrity_error.orig).lower()


def to_trade_record(trade: Trade) -> TradeRecord:
    """
    Convert a Trade row into the engine's TradeRecord.

    Raises:
        MalformedContractMonthError: the stored contract month cannot be parsed
    """
    return TradeRecord(
        trade_id=trade.id,
        trade_date=trade.trade_date,
        contract_month=ContractMonth.parse(trade.contract_month, trade_id=trade.id),
        direction=trade.buy_sell,
        quantity=Decimal(trade.quantity_mt),
        trade_price=Decimal(trade.price_usd),
        counterparty=trade.counterparty,
    )


class SqlValuationRepository:
    """Reads trades and curve points, reads and writes valuation rows."""

    # =========================================================================
    # TRADE READER
    # =========================================================================

    def load_trades(self, db: Session, up_to: date) -> list[TradeRecord]:
        """All trades dated on or before up_to, oldest first."""
        query = (
            select(Trade)
            .where(Trade.trade_date <= up_to)
            .order_by(Trade.trade_date, Trade.id)
        )
        trades = db.scalars(query).all()
        return [to_trade_record(t) for t in trades]

    # =========================================================================
    # CURVE READER
    # =========================================================================

    def load_curve(self, db: Session, as_of_date: date) -> dict[int, Decimal]:
        """
        Curve for one as-of date as {tenor_months: price}.

        Reading the whole curve once per run keeps every price in a run from
        the same read.
        """
        query = select(FuturesCurvePoint.tenor_months, FuturesCurvePoint.futures_price_usd).where(
            FuturesCurvePoint.as_of_date == as_of_date
        )
        return {tenor: Decimal(price) for tenor, price in db.execute(query).all()}

    # =========================================================================
    # MONTHLY VALUATIONS
    # =========================================================================

    def monthly_exists(self, db: Session, year_month: YearMonth) -> bool:
        query = select(exists().where(MonthlyPnL.year_month == year_month.label))
        return bool(db.scalar(query))

    def get_latest_monthly(self, db: Session, year_month: YearMonth) -> MonthlyPnL | None:
        """Most recent monthly row for a year-month (by valuation date)."""
        query = (
            select(MonthlyPnL)
            .where(MonthlyPnL.year_month == year_month.label)
            .order_by(MonthlyPnL.valuation_date.desc(), MonthlyPnL.id.desc())
            .limit(1)
        )
        return db.scalar(query)

    def insert_monthly(
            self,
            db: Session,
            valuation_date: date,
            year_month: YearMonth,
            unrealized_pnl: Decimal,
            reversal_pnl: Decimal,
            net_pnl: Decimal,
            position_count: int,
    ) -> MonthlyPnL:
        row = MonthlyPnL(
            valuation_date=valuation_date,
            year_month=year_month.label,
            unrealized_pnl=unrealized_pnl,
            reversal_pnl=reversal_pnl,
            net_pnl=net_pnl,
            position_count=position_count,
        )
        db.add(row)
        db.flush()
        return row

    # =========================================================================
    # DAILY VALUATIONS
    # =========================================================================

    def daily_exists(self, db: Session, valuation_date: date) -> bool:
        query = select(exists().where(DailyPnL.valuation_date == valuation_date))
        return bool(db.scalar(query))

    def insert_daily(
            self,
            db: Session,
            valuation_date: date,
            realized_pnl: Decimal,
            unrealized_pnl: Decimal,
            total_pnl: Decimal,
            position_count: int,
    ) -> DailyPnL:
        row = DailyPnL(
            valuation_date=valuation_date,
            realized_pnl=realized_pnl,
            unrealized_pnl=unrealized_pnl,
            total_pnl=total_pnl,
            position_count=position_count,
        )
        db.add(row)
        db.flush()
        return row
