# backend/tests/services/test_calculators.py
"""
Unit tests for valuation calculators.

These tests verify the pure calculation logic WITHOUT database dependencies,
using TradeRecord dataclasses directly.

Test Coverage:
- PositionClassifier: delivered vs open, trades after the valuation date
- CurvePriceLookup: all-or-nothing pricing, complete missing list
- UnrealizedPnLCalculator: sign convention, rounding, aggregation
"""

from datetime import date
from decimal import Decimal

import pytest

from tindesk.models import TradeDirection
from tindesk.services.exceptions import MissingCurveDataError
from tindesk.services.valuation.calculators import (
    PositionClassifier,
    CurvePriceLookup,
    UnrealizedPnLCalculator,
)
from tindesk.services.valuation.periods import ContractMonth
from tindesk.services.valuation.types import TradeRecord, OpenPosition, PositionPnL

VALUATION_DATE = date(2026, 3, 15)


def make_trade(
        trade_id: int = 1,
        contract_month: str = "2026-M06",
        direction: TradeDirection = TradeDirection.BUY,
        quantity: str = "10",
        price: str = "25000",
        trade_date: date = date(2026, 1, 10),
) -> TradeRecord:
    return TradeRecord(
        trade_id=trade_id,
        trade_date=trade_date,
        contract_month=ContractMonth.parse(contract_month),
        direction=direction,
        quantity=Decimal(quantity),
        trade_price=Decimal(price),
    )


def make_position(trade: TradeRecord, tenor_months: int = 3) -> OpenPosition:
    return OpenPosition(trade=trade, tenor_months=tenor_months)


# =============================================================================
# POSITION CLASSIFIER
# =============================================================================

class TestPositionClassifier:
    """Tests for open / delivered classification."""

    @pytest.fixture
    def classifier(self) -> PositionClassifier:
        return PositionClassifier()

    def test_future_contract_month_is_open(self, classifier):
        """A contract month after the valuation month is open."""
        positions = classifier.classify([make_trade(contract_month="2026-M06")], VALUATION_DATE)

        assert len(positions) == 1
        assert positions[0].tenor_months == 3

    def test_current_contract_month_is_delivered(self, classifier):
        """The valuation month's own contract has started delivery."""
        trade = make_trade(contract_month="2026-M03")

        assert classifier.is_delivered(trade, VALUATION_DATE)
        assert classifier.classify([trade], VALUATION_DATE) == []

    def test_delivered_on_first_day_of_contract_month(self, classifier):
        """Delivery starts on the first day of the contract month."""
        trade = make_trade(contract_month="2026-M04")

        assert not classifier.is_delivered(trade, date(2026, 3, 31))
        assert classifier.is_delivered(trade, date(2026, 4, 1))

    def test_past_contract_month_is_delivered(self, classifier):
        """Contract months before the valuation month are delivered."""
        trade = make_trade(contract_month="2025-M12")

        assert classifier.classify([trade], VALUATION_DATE) == []

    def test_trades_after_valuation_date_ignored(self, classifier):
        """Trades dated after the valuation date have not happened yet."""
        trade = make_trade(trade_date=date(2026, 3, 16))

        assert classifier.classify([trade], VALUATION_DATE) == []

    def test_trade_on_valuation_date_included(self, classifier):
        """A trade dated on the valuation date counts."""
        trade = make_trade(trade_date=VALUATION_DATE)

        assert len(classifier.classify([trade], VALUATION_DATE)) == 1

    def test_preserves_input_order(self, classifier):
        """Open positions come out in the order the trades went in."""
        trades = [
            make_trade(trade_id=3, contract_month="2026-M09"),
            make_trade(trade_id=1, contract_month="2026-M02"),
            make_trade(trade_id=2, contract_month="2026-M05"),
        ]

        positions = classifier.classify(trades, VALUATION_DATE)

        assert [p.trade.trade_id for p in positions] == [3, 2]
        assert [p.tenor_months for p in positions] == [6, 2]

    def test_no_trades_is_empty(self, classifier):
        """No trades is a valid, empty outcome."""
        assert classifier.classify([], VALUATION_DATE) == []


# =============================================================================
# CURVE PRICE LOOKUP
# =============================================================================

class TestCurvePriceLookup:
    """Tests for resolving curve prices."""

    def test_resolves_every_position(self):
        """Should pair each position with the price at its tenor."""
        lookup = CurvePriceLookup(VALUATION_DATE, {3: Decimal("26000"), 6: Decimal("26500")})
        p3 = make_position(make_trade(trade_id=1), tenor_months=3)
        p6 = make_position(make_trade(trade_id=2, contract_month="2026-M09"), tenor_months=6)

        priced = lookup.resolve([p3, p6])

        assert priced == [(p3, Decimal("26000")), (p6, Decimal("26500"))]

    def test_missing_tenor_raises(self):
        """Should fail when any position lacks a price."""
        lookup = CurvePriceLookup(VALUATION_DATE, {3: Decimal("26000")})
        positions = [
            make_position(make_trade(trade_id=1), tenor_months=3),
            make_position(make_trade(trade_id=2, contract_month="2026-M09"), tenor_months=6),
        ]

        with pytest.raises(MissingCurveDataError) as exc_info:
            lookup.resolve(positions)

        assert exc_info.value.missing == [("2026-M09", 6)]
        assert exc_info.value.valuation_date == VALUATION_DATE

    def test_lists_every_missing_pair_once(self):
        """Should report all missing pairs, without repeats, in order."""
        lookup = CurvePriceLookup(VALUATION_DATE, {})
        positions = [
            make_position(make_trade(trade_id=1, contract_month="2026-M06"), tenor_months=3),
            make_position(make_trade(trade_id=2, contract_month="2026-M09"), tenor_months=6),
            make_position(make_trade(trade_id=3, contract_month="2026-M06"), tenor_months=3),
        ]

        with pytest.raises(MissingCurveDataError) as exc_info:
            lookup.resolve(positions)

        assert exc_info.value.missing == [("2026-M06", 3), ("2026-M09", 6)]
        message = str(exc_info.value)
        assert "2026-M06 (3M)" in message
        assert "2026-M09 (6M)" in message
        assert "2026-03-15" in message

    def test_no_positions_needs_no_curve(self):
        """An empty position list resolves against an empty curve."""
        assert CurvePriceLookup(VALUATION_DATE, {}).resolve([]) == []


# =============================================================================
# UNREALIZED P&L CALCULATOR
# =============================================================================

class TestUnrealizedPnLCalculator:
    """Tests for mark-to-market PnL."""

    @pytest.fixture
    def calculator(self) -> UnrealizedPnLCalculator:
        return UnrealizedPnLCalculator()

    def test_buy_gains_when_curve_rises(self, calculator):
        """BUY 10t @ 25,000 against 26,000 is +10,000."""
        position = make_position(make_trade(direction=TradeDirection.BUY))

        result = calculator.calculate(position, Decimal("26000"))

        assert result.unrealized_pnl == Decimal("10000.00")
        assert result.curve_price == Decimal("26000")

    def test_sell_gains_when_curve_falls(self, calculator):
        """SELL 5t @ 27,000 against 26,500 is +2,500."""
        position = make_position(make_trade(direction=TradeDirection.SELL, quantity="5", price="27000"))

        result = calculator.calculate(position, Decimal("26500"))

        assert result.unrealized_pnl == Decimal("2500.00")

    def test_sell_loses_when_curve_rises(self, calculator):
        """A short position loses as the curve rises."""
        position = make_position(make_trade(direction=TradeDirection.SELL))

        result = calculator.calculate(position, Decimal("25500"))

        assert result.unrealized_pnl == Decimal("-5000.00")

    def test_at_trade_price_is_zero(self, calculator):
        """No move, no PnL."""
        position = make_position(make_trade())

        assert calculator.calculate(position, Decimal("25000")).unrealized_pnl == Decimal("0.00")

    def test_rounds_to_cents(self, calculator):
        """Fractional quantities are rounded to cents per position."""
        position = make_position(make_trade(quantity="0.333", price="25000"))

        result = calculator.calculate(position, Decimal("25000.01"))

        assert result.unrealized_pnl == Decimal("0.00")

    def test_half_cent_rounds_up(self, calculator):
        """Half a cent rounds away from zero."""
        position = make_position(make_trade(quantity="0.5", price="25000"))

        result = calculator.calculate(position, Decimal("25000.01"))

        assert result.unrealized_pnl == Decimal("0.01")

    def test_total_sums_positions(self, calculator):
        """Aggregate is the sum of per-position amounts."""
        buy = make_position(make_trade(trade_id=1))
        sell = make_position(make_trade(trade_id=2, direction=TradeDirection.SELL, quantity="5", price="27000"))

        results = calculator.calculate_all([(buy, Decimal("26000")), (sell, Decimal("26500"))])

        assert [r.unrealized_pnl for r in results] == [Decimal("10000.00"), Decimal("2500.00")]
        assert calculator.total(results) == Decimal("12500.00")

    def test_total_of_nothing_is_zero(self, calculator):
        """Zero open positions is exactly zero, not an error."""
        total = calculator.total([])

        assert total == Decimal("0")
        assert str(total) == "0.00"

    def test_total_is_sum_of_rounded_amounts(self):
        """The breakdown always adds up to the total."""
        position = make_position(make_trade())
        results = [
            PositionPnL(position=position, curve_price=Decimal("1"), unrealized_pnl=Decimal("0.01")),
            PositionPnL(position=position, curve_price=Decimal("1"), unrealized_pnl=Decimal("0.02")),
        ]

        assert UnrealizedPnLCalculator.total(results) == Decimal("0.03")

    def test_total_rounds_each_position_not_the_sum(self, calculator):
        """Sub-cent amounts vanish per position even when their exact sum would not."""
        positions = [
            (make_position(make_trade(trade_id=i, quantity="0.4", price="25000")), Decimal("25000.01"))
            for i in (1, 2, 3)
        ]

        results = calculator.calculate_all(positions)

        # Exact sum is 0.012, which would round to 0.01
        assert [r.unrealized_pnl for r in results] == [Decimal("0.00")] * 3
        assert calculator.total(results) == Decimal("0.00")
