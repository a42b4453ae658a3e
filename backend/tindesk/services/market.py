# backend/tindesk/services/market.py
"""
Read-only access to the trade book and the futures curve.

Trades and curve points are maintained by other systems; this service only
lists them for display and reconciliation.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from tindesk.models import FuturesCurvePoint, Trade, TradeDirection
from tindesk.services.exceptions import NotFoundError
from tindesk.services.valuation.periods import ContractMonth

logger = logging.getLogger(__name__)


class MarketQueryService:
    """Lists trades and curve points."""

    def list_trades(
            self,
            db: Session,
            to_date: date | None = None,
            contract_month: str | None = None,
            direction: TradeDirection | None = None,
            skip: int = 0,
            limit: int = 100,
    ) -> tuple[list[Trade], int]:
        """
        Trades, newest trade date first.

        Args:
            to_date: Only trades dated on or before this date
            contract_month: Only trades for this "YYYY-Mmm" delivery month
            direction: Only BUY or only SELL trades

        Returns:
            (page of trades, total matching trades)

        Raises:
            MalformedContractMonthError: contract_month filter is not "YYYY-Mmm"
        """
        conditions = []
        if to_date is not None:
            conditions.append(Trade.trade_date <= to_date)
        if contract_month is not None:
            conditions.append(Trade.contract_month == ContractMonth.parse(contract_month).token)
        if direction is not None:
            conditions.append(Trade.buy_sell == direction)

        total = db.scalar(select(func.count(Trade.id)).where(*conditions)) or 0
        query = (
            select(Trade)
            .where(*conditions)
            .order_by(Trade.trade_date.desc(), Trade.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(db.scalars(query).all()), total

    def latest_curve_date(self, db: Session) -> date | None:
        return db.scalar(select(func.max(FuturesCurvePoint.as_of_date)))

    def get_curve(
            self,
            db: Session,
            as_of_date: date | None = None,
    ) -> tuple[date, list[FuturesCurvePoint]]:
        """
        Curve points for one as-of date, ordered by tenor.

        Without a date, the latest as-of date that has points is used.

        Raises:
            NotFoundError: no curve points for the date (or none at all)
        """
        if as_of_date is None:
            as_of_date = self.latest_curve_date(db)
            if as_of_date is None:
                raise NotFoundError("No futures curve data available", resource_type="futures_curve")

        query = (
            select(FuturesCurvePoint)
            .where(FuturesCurvePoint.as_of_date == as_of_date)
            .order_by(FuturesCurvePoint.tenor_months)
        )
        points = list(db.scalars(query).all())
        if not points:
            raise NotFoundError(
                f"No futures curve data for {as_of_date}",
                resource_type="futures_curve",
                resource_id=as_of_date.isoformat(),
            )

        logger.debug(f"Loaded {len(points)} curve points for {as_of_date}")
        return as_of_date, points
