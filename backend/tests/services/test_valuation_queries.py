# backend/tests/services/test_valuation_queries.py
"""
Tests for the read-only query services.

Test Coverage:
- ValuationQueryService: filters, newest-first ordering, pagination totals
- MarketQueryService: trade filters, curve by date / latest date
"""

from datetime import date
from decimal import Decimal

import pytest

from tindesk.models import TradeDirection
from tindesk.services.exceptions import MalformedContractMonthError, NotFoundError
from tindesk.services.market import MarketQueryService
from tindesk.services.valuation import ValuationQueryService, YearMonth
from tests.conftest import create_trade, create_curve, create_monthly, create_daily


@pytest.fixture
def queries() -> ValuationQueryService:
    return ValuationQueryService()


@pytest.fixture
def market() -> MarketQueryService:
    return MarketQueryService()


class TestListMonthly:
    """Monthly valuation listing."""

    @pytest.fixture(autouse=True)
    def seed(self, db):
        create_monthly(db, "2025-12", net_pnl="100", valuation_date=date(2025, 12, 31))
        create_monthly(db, "2026-01", net_pnl="200", valuation_date=date(2026, 1, 30))
        create_monthly(db, "2026-02", net_pnl="300", valuation_date=date(2026, 2, 27))

    def test_newest_first(self, db, queries):
        """Ordered by year-month descending."""
        results, total = queries.list_monthly(db)

        assert [r.year_month for r in results] == ["2026-02", "2026-01", "2025-12"]
        assert total == 3

    def test_filter_by_year_month(self, db, queries):
        results, total = queries.list_monthly(db, year_month=YearMonth(2026, 1))

        assert total == 1
        assert results[0].net_pnl == Decimal("200")

    def test_filter_by_date_range(self, db, queries):
        """Date bounds apply to the valuation date, inclusive."""
        results, total = queries.list_monthly(
            db, from_date=date(2026, 1, 1), to_date=date(2026, 1, 30)
        )

        assert [r.year_month for r in results] == ["2026-01"]
        assert total == 1

    def test_pagination(self, db, queries):
        """Total counts all matches, not just the page."""
        results, total = queries.list_monthly(db, skip=1, limit=1)

        assert [r.year_month for r in results] == ["2026-01"]
        assert total == 3

    def test_results_have_no_breakdown(self, db, queries):
        """Stored records never carry per-position detail."""
        results, _ = queries.list_monthly(db)

        assert all(r.positions == () for r in results)


class TestListDaily:
    """Daily valuation listing."""

    def test_newest_first_with_range(self, db, queries):
        for day in (14, 15, 16, 17):
            create_daily(db, date(2026, 3, day))

        results, total = queries.list_daily(db, from_date=date(2026, 3, 15), to_date=date(2026, 3, 16))

        assert [r.valuation_date for r in results] == [date(2026, 3, 16), date(2026, 3, 15)]
        assert total == 2

    def test_empty(self, db, queries):
        """No records is an empty page, not an error."""
        assert queries.list_daily(db) == ([], 0)


class TestMarketQueries:
    """Trade book and curve reads."""

    def test_trades_newest_first(self, db, market):
        older = create_trade(db, date(2026, 1, 5), "2026-M06")
        newer = create_trade(db, date(2026, 2, 5), "2026-M09")

        trades, total = market.list_trades(db)

        assert [t.id for t in trades] == [newer.id, older.id]
        assert total == 2

    def test_trade_filters(self, db, market):
        """to_date, contract month and direction combine."""
        match = create_trade(db, date(2026, 1, 5), "2026-M06", TradeDirection.SELL)
        create_trade(db, date(2026, 1, 6), "2026-M06", TradeDirection.BUY)
        create_trade(db, date(2026, 1, 7), "2026-M09", TradeDirection.SELL)
        create_trade(db, date(2026, 3, 1), "2026-M06", TradeDirection.SELL)

        trades, total = market.list_trades(
            db,
            to_date=date(2026, 2, 1),
            contract_month="2026-M06",
            direction=TradeDirection.SELL,
        )

        assert [t.id for t in trades] == [match.id]
        assert total == 1

    def test_trade_filter_rejects_bad_contract_month(self, db, market):
        with pytest.raises(MalformedContractMonthError):
            market.list_trades(db, contract_month="June")

    def test_curve_for_date_ordered_by_tenor(self, db, market):
        create_curve(db, date(2026, 3, 15), {6: "26500", 0: "25000", 3: "26000"})

        as_of, points = market.get_curve(db, date(2026, 3, 15))

        assert as_of == date(2026, 3, 15)
        assert [p.tenor_months for p in points] == [0, 3, 6]

    def test_latest_curve_by_default(self, db, market):
        """Without a date, the most recent as-of date is used."""
        create_curve(db, date(2026, 3, 14), {0: "24900"})
        create_curve(db, date(2026, 3, 15), {0: "25000"})

        as_of, points = market.get_curve(db)

        assert as_of == date(2026, 3, 15)
        assert Decimal(points[0].futures_price_usd) == Decimal("25000")

    def test_missing_curve_date(self, db, market):
        create_curve(db, date(2026, 3, 15), {0: "25000"})

        with pytest.raises(NotFoundError) as exc_info:
            market.get_curve(db, date(2026, 3, 16))

        assert exc_info.value.resource_id == "2026-03-16"

    def test_no_curve_at_all(self, db, market):
        with pytest.raises(NotFoundError):
            market.get_curve(db)
