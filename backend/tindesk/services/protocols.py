# backend/tindesk/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- The SQLAlchemy repository satisfies it without inheritance
- Tests can pass an in-memory fake
- The storage boundary of the valuation engine is documented in one place
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from tindesk.models import MonthlyPnL, DailyPnL
    from tindesk.services.valuation.periods import YearMonth
    from tindesk.services.valuation.types import TradeRecord


class ValuationRepositoryProtocol(Protocol):
    """Storage operations required by ValuationService."""

    # Trade reader
    def load_trades(self, db: Session, up_to: date) -> list[TradeRecord]:
        ...

    # Curve reader
    def load_curve(self, db: Session, as_of_date: date) -> dict[int, Decimal]:
        ...

    # Valuation reader / writer
    def monthly_exists(self, db: Session, year_month: YearMonth) -> bool:
        ...

    def get_latest_monthly(self, db: Session, year_month: YearMonth) -> MonthlyPnL | None:
        ...

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
        ...

    def daily_exists(self, db: Session, valuation_date: date) -> bool:
        ...

    def insert_daily(
        self,
        db: Session,
        valuation_date: date,
        realized_pnl: Decimal,
        unrealized_pnl: Decimal,
        total_pnl: Decimal,
        position_count: int,
    ) -> DailyPnL:
        ...
