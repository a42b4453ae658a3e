# backend/tindesk/services/valuation/queries.py
"""
Read-only access to stored valuations for reporting.

Filtering and newest-first ordering only; no business logic.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from tindesk.models import MonthlyPnL, DailyPnL
from tindesk.services.valuation.periods import YearMonth
from tindesk.services.valuation.service import daily_result_from_row, monthly_result_from_row
from tindesk.services.valuation.types import DailyValuationResult, MonthlyValuationResult


class ValuationQueryService:
    """Lists monthly and daily valuation records."""

    def list_monthly(
            self,
            db: Session,
            year_month: YearMonth | None = None,
            from_date: date | None = None,
            to_date: date | None = None,
            skip: int = 0,
            limit: int = 100,
    ) -> tuple[list[MonthlyValuationResult], int]:
        """
        Monthly records, newest year-month first.

        Returns:
            (page of records, total matching records)
        """
        conditions = []
        if year_month is not None:
            conditions.append(MonthlyPnL.year_month == year_month.label)
        if from_date is not None:
            conditions.append(MonthlyPnL.valuation_date >= from_date)
        if to_date is not None:
            conditions.append(MonthlyPnL.valuation_date <= to_date)

        total = db.scalar(select(func.count(MonthlyPnL.id)).where(*conditions)) or 0
        query = (
            select(MonthlyPnL)
            .where(*conditions)
            .order_by(MonthlyPnL.year_month.desc(), MonthlyPnL.valuation_date.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = db.scalars(query).all()
        return [monthly_result_from_row(r) for r in rows], total

    def list_daily(
            self,
            db: Session,
            from_date: date | None = None,
            to_date: date | None = None,
            skip: int = 0,
            limit: int = 100,
    ) -> tuple[list[DailyValuationResult], int]:
        """
        Daily records, newest valuation date first.

        Returns:
            (page of records, total matching records)
        """
        conditions = []
        if from_date is not None:
            conditions.append(DailyPnL.valuation_date >= from_date)
        if to_date is not None:
            conditions.append(DailyPnL.valuation_date <= to_date)

        total = db.scalar(select(func.count(DailyPnL.id)).where(*conditions)) or 0
        query = (
            select(DailyPnL)
            .where(*conditions)
            .order_by(DailyPnL.valuation_date.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = db.scalars(query).all()
        return [daily_result_from_row(r) for r in rows], total
