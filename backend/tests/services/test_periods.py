# backend/tests/services/test_periods.py
"""
Unit tests for contract month parsing and tenor arithmetic.

Test Coverage:
- ContractMonth: "YYYY-Mmm" parsing, first day, token round trip
- YearMonth: "YYYY-MM" parsing, previous month (incl. January wrap)
- calculate_tenor_months: month difference, clamped at zero
- parse_valuation_date: ISO strings and date objects
"""

from datetime import date

import pytest

from tindesk.services.exceptions import MalformedContractMonthError, ValidationError
from tindesk.services.valuation.periods import (
    ContractMonth,
    YearMonth,
    calculate_tenor_months,
    parse_valuation_date,
)


class TestContractMonth:
    """Tests for ContractMonth.parse and its derived values."""

    def test_parse_valid_token(self):
        """Should parse year and month from a YYYY-Mmm token."""
        cm = ContractMonth.parse("2026-M06")

        assert cm.year == 2026
        assert cm.month == 6
        assert cm.first_day == date(2026, 6, 1)

    def test_token_round_trip(self):
        """Should render the same token it was parsed from."""
        assert ContractMonth.parse("2027-M01").token == "2027-M01"
        assert str(ContractMonth(2026, 12)) == "2026-M12"

    @pytest.mark.parametrize("token", ["2026-06", "2026-M6", "26-M06", "2026-m06", "", "2026-M06 "])
    def test_rejects_wrong_shape(self, token):
        """Should reject anything that is not exactly YYYY-Mmm."""
        with pytest.raises(MalformedContractMonthError) as exc_info:
            ContractMonth.parse(token)

        assert exc_info.value.token == token

    @pytest.mark.parametrize("token", ["2026-M00", "2026-M13", "0000-M06"])
    def test_rejects_invalid_calendar_month(self, token):
        """Should reject months outside 01-12 and year 0000."""
        with pytest.raises(MalformedContractMonthError):
            ContractMonth.parse(token)

    def test_error_names_trade(self):
        """Should carry the offending trade id into the error message."""
        with pytest.raises(MalformedContractMonthError) as exc_info:
            ContractMonth.parse("Jun-26", trade_id=42)

        assert exc_info.value.trade_id == 42
        assert "trade 42" in str(exc_info.value)

    def test_ordering(self):
        """Should order chronologically."""
        assert ContractMonth(2026, 12) < ContractMonth(2027, 1)


class TestYearMonth:
    """Tests for the accounting month key."""

    def test_of_date(self):
        """Should take year and month of a date, ignoring the day."""
        assert YearMonth.of(date(2026, 3, 31)).label == "2026-03"

    def test_previous_within_year(self):
        """Should step back one month."""
        assert YearMonth(2026, 3).previous() == YearMonth(2026, 2)

    def test_previous_wraps_january(self):
        """January's previous month is December of the prior year."""
        assert YearMonth(2026, 1).previous() == YearMonth(2025, 12)

    def test_parse_label(self):
        """Should parse YYYY-MM."""
        assert YearMonth.parse("2025-12") == YearMonth(2025, 12)

    @pytest.mark.parametrize("label", ["2025-13", "2025-1", "2025/12", "December", "0000-05"])
    def test_parse_rejects_invalid(self, label):
        """Should raise ValidationError on the year_month field."""
        with pytest.raises(ValidationError) as exc_info:
            YearMonth.parse(label)

        assert exc_info.value.field == "year_month"


class TestCalculateTenorMonths:
    """Tests for tenor arithmetic."""

    def test_months_ahead(self):
        """Should count whole calendar months to the delivery month."""
        assert calculate_tenor_months(date(2026, 3, 15), ContractMonth(2026, 6)) == 3

    def test_day_of_month_ignored(self):
        """First and last day of the valuation month give the same tenor."""
        cm = ContractMonth(2026, 6)
        assert calculate_tenor_months(date(2026, 3, 1), cm) == 3
        assert calculate_tenor_months(date(2026, 3, 31), cm) == 3

    def test_across_year_boundary(self):
        """Should count across December/January."""
        assert calculate_tenor_months(date(2026, 11, 20), ContractMonth(2027, 2)) == 3

    def test_same_month_is_zero(self):
        """Delivery in the valuation month is tenor 0."""
        assert calculate_tenor_months(date(2026, 3, 15), ContractMonth(2026, 3)) == 0

    def test_past_month_clamped_to_zero(self):
        """Should never return a negative tenor."""
        assert calculate_tenor_months(date(2026, 3, 15), ContractMonth(2025, 11)) == 0


class TestParseValuationDate:
    """Tests for valuation date input handling."""

    def test_accepts_date(self):
        """Should pass a date through unchanged."""
        assert parse_valuation_date(date(2026, 3, 15)) == date(2026, 3, 15)

    def test_accepts_iso_string(self):
        """Should parse an ISO date string."""
        assert parse_valuation_date("2026-03-15") == date(2026, 3, 15)

    @pytest.mark.parametrize("value", ["15/03/2026", "2026-02-30", "yesterday"])
    def test_rejects_invalid_string(self, value):
        """Should raise ValidationError on the valuation_date field."""
        with pytest.raises(ValidationError) as exc_info:
            parse_valuation_date(value)

        assert exc_info.value.field == "valuation_date"
