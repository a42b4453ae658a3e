# backend/tindesk/services/valuation/periods.py
"""
Contract periods and tenor arithmetic.

Two calendar-month value types:
    ContractMonth - delivery month of a trade, stored as "2026-M03"
    YearMonth     - accounting month of a monthly valuation, stored as "2026-03"

Both are parsed once at the storage boundary and then passed around as
(year, month) pairs; nothing downstream re-parses strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, MINYEAR

from tindesk.services.exceptions import MalformedContractMonthError, ValidationError

_CONTRACT_MONTH_RE = re.compile(r"^(\d{4})-M(\d{2})$")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True, order=True)
class ContractMonth:
    """Delivery month of a trade."""

    year: int
    month: int

    @classmethod
    def parse(cls, token: str, trade_id: int | None = None) -> ContractMonth:
        """
        Parse a "YYYY-Mmm" token.

        Raises:
            MalformedContractMonthError: wrong shape, year 0000 or month outside 01-12
        """
        match = _CONTRACT_MONTH_RE.match(token or "")
        if match is None:
            raise MalformedContractMonthError(token, trade_id=trade_id)

        year, month = int(match.group(1)), int(match.group(2))
        if year < MINYEAR or not 1 <= month <= 12:
            raise MalformedContractMonthError(token, trade_id=trade_id)

        return cls(year=year, month=month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def token(self) -> str:
        return f"{self.year:04d}-M{self.month:02d}"

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True, order=True)
class YearMonth:
    """Accounting month keying a monthly valuation."""

    year: int
    month: int

    @classmethod
    def of(cls, d: date) -> YearMonth:
        return cls(year=d.year, month=d.month)

    @classmethod
    def parse(cls, label: str) -> YearMonth:
        """
        Parse a "YYYY-MM" label.

        Raises:
            ValidationError: wrong shape or month outside 01-12
        """
        match = _YEAR_MONTH_RE.match(label or "")
        if match is None or int(match.group(1)) < MINYEAR or not 1 <= int(match.group(2)) <= 12:
            raise ValidationError(
                f"Invalid year-month '{label}': expected format YYYY-MM",
                field="year_month",
            )
        return cls(year=int(match.group(1)), month=int(match.group(2)))

    def previous(self) -> YearMonth:
        """The calendar month before this one (January wraps to December)."""
        if self.month == 1:
            return YearMonth(year=self.year - 1, month=12)
        return YearMonth(year=self.year, month=self.month - 1)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.label


def calculate_tenor_months(valuation_date: date, contract_month: ContractMonth) -> int:
    """
    Whole calendar months from the valuation month to the delivery month.

    Day of month is ignored. Delivery months at or before the valuation month
    are priced at tenor 0 (spot), never a negative tenor.

    Example:
        >>> calculate_tenor_months(date(2026, 3, 15), ContractMonth(2026, 6))
        3
    """
    delivery = contract_month.first_day
    months = (delivery.year - valuation_date.year) * 12 + (delivery.month - valuation_date.month)
    return max(0, months)


def parse_valuation_date(value: date | str) -> date:
    """
    Accept a date or an ISO calendar date string ("2026-03-15").

    Raises:
        ValidationError: the string is not an ISO calendar date
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid valuation date '{value}': expected ISO format YYYY-MM-DD",
            field="valuation_date",
        )
