# backend/tindesk/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator has ONE responsibility and no database access:
- PositionClassifier: Which trades are still open on the valuation date
- CurvePriceLookup: Curve price per tenor, all-or-nothing
- UnrealizedPnLCalculator: Mark-to-market PnL per position and in aggregate

The service loads data through the repository and feeds it here, which keeps
these pure and unit-testable with plain dataclasses.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from tindesk.services.exceptions import MissingCurveDataError
from tindesk.services.valuation.periods import calculate_tenor_months
from tindesk.services.valuation.types import TradeRecord, OpenPosition, PositionPnL

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


# =============================================================================
# POSITION CLASSIFIER
# =============================================================================

class PositionClassifier:
    """
    Splits trades into delivered and open as of a valuation date.

    A trade is delivered once the first day of its contract month is on or
    before the valuation date; it then carries no price risk and is not
    valued. Trades dated after the valuation date have not happened yet and
    are ignored entirely.
    """

    def is_delivered(self, trade: TradeRecord, valuation_date: date) -> bool:
        return trade.contract_month.first_day <= valuation_date

    def classify(
            self,
            trades: Iterable[TradeRecord],
            valuation_date: date,
    ) -> list[OpenPosition]:
        """
        Return open positions in input order, each with its tenor.

        An empty result (no trades, or all delivered) is a valid outcome.
        """
        open_positions: list[OpenPosition] = []
        delivered = 0

        for trade in trades:
            if trade.trade_date > valuation_date:
                continue
            if self.is_delivered(trade, valuation_date):
                delivered += 1
                continue
            open_positions.append(OpenPosition(
                trade=trade,
                tenor_months=calculate_tenor_months(valuation_date, trade.contract_month),
            ))

        logger.debug(
            f"Classified trades as of {valuation_date}: "
            f"{len(open_positions)} open, {delivered} delivered"
        )
        return open_positions


# =============================================================================
# CURVE PRICE LOOKUP
# =============================================================================

class CurvePriceLookup:
    """
    Resolves curve prices for open positions from one as-of date's curve.

    There is no fallback to nearby tenors or earlier dates: a missing price
    fails the whole run.
    """

    def __init__(self, valuation_date: date, curve: Mapping[int, Decimal]) -> None:
        """
        Args:
            valuation_date: As-of date the curve was loaded for
            curve: {tenor_months: price}
        """
        self._valuation_date = valuation_date
        self._curve = curve

    def get(self, tenor_months: int) -> Decimal | None:
        return self._curve.get(tenor_months)

    def resolve(self, positions: Iterable[OpenPosition]) -> list[tuple[OpenPosition, Decimal]]:
        """
        Pair every position with its curve price.

        Raises:
            MissingCurveDataError: listing every (contract month, tenor) pair
                with no price, each pair once
        """
        priced: list[tuple[OpenPosition, Decimal]] = []
        missing: list[tuple[str, int]] = []

        for position in positions:
            price = self.get(position.tenor_months)
            if price is None:
                pair = (position.trade.contract_month.token, position.tenor_months)
                if pair not in missing:
                    missing.append(pair)
                continue
            priced.append((position, price))

        if missing:
            raise MissingCurveDataError(self._valuation_date, missing)

        return priced


# =============================================================================
# UNREALIZED P&L CALCULATOR
# =============================================================================

class UnrealizedPnLCalculator:
    """
    Mark-to-market PnL of open positions.

    Formula: sign × (curve_price − trade_price) × quantity
    where sign is +1 for a buy and −1 for a sell: a buyer gains when the
    curve rises above the trade price, a seller when it falls below.

    Per-position amounts are rounded to cents; the aggregate is the exact sum
    of the rounded amounts so the breakdown always adds up. The total may
    differ from rounding the exact sum by up to half a cent per position.
    """

    def calculate(self, position: OpenPosition, curve_price: Decimal) -> PositionPnL:
        trade = position.trade
        pnl = trade.sign * (curve_price - trade.trade_price) * trade.quantity
        return PositionPnL(
            position=position,
            curve_price=curve_price,
            unrealized_pnl=pnl.quantize(CENT, rounding=ROUND_HALF_UP),
        )

    def calculate_all(
            self,
            priced_positions: Iterable[tuple[OpenPosition, Decimal]],
    ) -> list[PositionPnL]:
        return [self.calculate(position, price) for position, price in priced_positions]

    @staticmethod
    def total(results: Iterable[PositionPnL]) -> Decimal:
        """Sum of per-position PnL; exactly 0.00 for no positions."""
        return sum((r.unrealized_pnl for r in results), Decimal("0")).quantize(CENT)
