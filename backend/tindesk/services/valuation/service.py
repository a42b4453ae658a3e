# backend/tindesk/services/valuation/service.py
"""
Valuation Service - Orchestrator for mark-to-market valuation runs.

Entry points:
- run_monthly_valuation(): month-end valuation with reversal of the prior month
- run_daily_valuation(): daily valuation (realized + unrealized)
- run_valuation(): dispatch by cycle name ("monthly" | "daily")
- get_open_positions(): classification only, nothing priced or written

Design Principles:
- Dependency Injection: repository injected via constructor, Session per call
- All-or-nothing: a run either commits exactly one row or writes nothing
- Storage-level uniqueness closes the duplicate race; the up-front existence
  check only turns the common re-run into a cheap, early failure
- No HTTP Knowledge: raises domain exceptions, not HTTPException

Usage:
    from tindesk.services.valuation import ValuationService

    service = ValuationService()
    result = service.run_monthly_valuation(db, "2026-03-15")
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tindesk.config import settings
from tindesk.models import MonthlyPnL, DailyPnL
from tindesk.services.exceptions import (
    DuplicateValuationError,
    ServiceError,
    StorageError,
    ValidationError,
)
from tindesk.services.valuation.calculators import (
    CENT,
    CurvePriceLookup,
    PositionClassifier,
    UnrealizedPnLCalculator,
)
from tindesk.services.valuation.periods import YearMonth, parse_valuation_date
from tindesk.services.valuation.repository import (
    SqlValuationRepository,
    is_unique_constraint_violation,
)
from tindesk.services.valuation.types import (
    DailyValuationResult,
    MonthlyValuationResult,
    OpenPosition,
    PositionPnL,
)

if TYPE_CHECKING:
    from tindesk.services.protocols import ValuationRepositoryProtocol

logger = logging.getLogger(__name__)

CYCLE_MONTHLY = "monthly"
CYCLE_DAILY = "daily"
VALID_CYCLES = (CYCLE_MONTHLY, CYCLE_DAILY)

# Realized PnL on delivery settlement is not modelled yet
DAILY_REALIZED_PNL = Decimal("0.00")


class ValuationService:
    """
    Runs monthly and daily valuations.

    Stateless apart from its collaborators, so one instance can be shared
    across requests.
    """

    def __init__(
            self,
            repository: ValuationRepositoryProtocol | None = None,
            isolation_level: str | None = None,
    ) -> None:
        """
        Args:
            repository: Storage boundary (default: SqlValuationRepository)
            isolation_level: Isolation requested for a run on server databases
                (default: settings.valuation_isolation_level)
        """
        self._repository = repository or SqlValuationRepository()
        self._isolation_level = isolation_level or settings.valuation_isolation_level
        self._classifier = PositionClassifier()
        self._pnl_calculator = UnrealizedPnLCalculator()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def run_valuation(
            self,
            db: Session,
            cycle: str,
            valuation_date: date | str,
    ) -> MonthlyValuationResult | DailyValuationResult:
        """
        Run the named cycle.

        Raises:
            ValidationError: cycle is not "monthly" or "daily"
        """
        if cycle == CYCLE_MONTHLY:
            return self.run_monthly_valuation(db, valuation_date)
        if cycle == CYCLE_DAILY:
            return self.run_daily_valuation(db, valuation_date)
        raise ValidationError(
            f"Invalid valuation type: '{cycle}'. Valid options: monthly, daily",
            field="type",
        )

    def run_monthly_valuation(self, db: Session, valuation_date: date | str) -> MonthlyValuationResult:
        """
        Value all open positions for the month of valuation_date and persist it.

        Steps:
            1. Reject if the year-month is already valued
            2. Load trades dated <= valuation_date and keep the open ones
            3. No open positions: persist an all-zero record
            4. Price every open position from the curve (abort if any missing)
            5. Sum unrealized PnL
            6. reversal = −(previous month's net PnL), or 0 if none
            7. net = reversal + unrealized; persist

        Raises:
            ValidationError: valuation_date is not an ISO date
            DuplicateValuationError: the year-month already has a record
            MalformedContractMonthError: a trade's contract month is unparseable
            MissingCurveDataError: some open position has no curve price
            StorageError: any other database failure
        """
        valuation_date = parse_valuation_date(valuation_date)
        year_month = YearMonth.of(valuation_date)
        logger.info(f"Starting monthly valuation for {year_month} (valuation date {valuation_date})")

        try:
            self._begin_consistent_read(db)

            if self._repository.monthly_exists(db, year_month):
                raise DuplicateValuationError(CYCLE_MONTHLY, year_month.label)

            positions = self._value_open_positions(db, valuation_date)
            unrealized = self._pnl_calculator.total(positions)

            if positions:
                reversal = self._reversal_for(db, year_month)
            else:
                reversal = Decimal("0.00")
            net = (reversal + unrealized).quantize(CENT)

            row = self._repository.insert_monthly(
                db,
                valuation_date=valuation_date,
                year_month=year_month,
                unrealized_pnl=unrealized,
                reversal_pnl=reversal,
                net_pnl=net,
                position_count=len(positions),
            )
            db.commit()

        except IntegrityError as e:
            db.rollback()
            if is_unique_constraint_violation(e):
                logger.warning(f"Monthly valuation for {year_month} committed concurrently")
                raise DuplicateValuationError(CYCLE_MONTHLY, year_month.label) from e
            logger.error(f"Monthly valuation insert failed for {year_month}: {e}")
            raise StorageError("monthly valuation", str(e.orig)) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Monthly valuation for {year_month} aborted by storage failure: {e}")
            raise StorageError("monthly valuation", str(e)) from e
        except ServiceError as e:
            db.rollback()
            logger.warning(f"Monthly valuation for {year_month} aborted: {e}")
            raise

        result = monthly_result_from_row(row, positions)
        logger.info(
            f"Monthly valuation stored for {year_month}: "
            f"unrealized={result.unrealized_pnl}, reversal={result.reversal_pnl}, "
            f"net={result.net_pnl}, positions={result.position_count}"
        )
        return result

    def run_daily_valuation(self, db: Session, valuation_date: date | str) -> DailyValuationResult:
        """
        Value all open positions as of valuation_date and persist it.

        Same as the monthly cycle without reversal, keyed by date.
        realized_pnl is always 0.

        Raises:
            ValidationError, DuplicateValuationError, MalformedContractMonthError,
            MissingCurveDataError, StorageError (see run_monthly_valuation)
        """
        valuation_date = parse_valuation_date(valuation_date)
        key = valuation_date.isoformat()
        logger.info(f"Starting daily valuation for {key}")

        try:
            self._begin_consistent_read(db)

            if self._repository.daily_exists(db, valuation_date):
                raise DuplicateValuationError(CYCLE_DAILY, key)

            positions = self._value_open_positions(db, valuation_date)
            unrealized = self._pnl_calculator.total(positions)
            total = (DAILY_REALIZED_PNL + unrealized).quantize(CENT)

            row = self._repository.insert_daily(
                db,
                valuation_date=valuation_date,
                realized_pnl=DAILY_REALIZED_PNL,
                unrealized_pnl=unrealized,
                total_pnl=total,
                position_count=len(positions),
            )
            db.commit()

        except IntegrityError as e:
            db.rollback()
            if is_unique_constraint_violation(e):
                logger.warning(f"Daily valuation for {key} committed concurrently")
                raise DuplicateValuationError(CYCLE_DAILY, key) from e
            logger.error(f"Daily valuation insert failed for {key}: {e}")
            raise StorageError("daily valuation", str(e.orig)) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Daily valuation for {key} aborted by storage failure: {e}")
            raise StorageError("daily valuation", str(e)) from e
        except ServiceError as e:
            db.rollback()
            logger.warning(f"Daily valuation for {key} aborted: {e}")
            raise

        result = daily_result_from_row(row, positions)
        logger.info(
            f"Daily valuation stored for {key}: "
            f"unrealized={result.unrealized_pnl}, total={result.total_pnl}, "
            f"positions={result.position_count}"
        )
        return result

    def get_open_positions(self, db: Session, valuation_date: date | str) -> list[OpenPosition]:
        """Open positions as of valuation_date. Reads only."""
        valuation_date = parse_valuation_date(valuation_date)
        trades = self._repository.load_trades(db, up_to=valuation_date)
        return self._classifier.classify(trades, valuation_date)

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _value_open_positions(self, db: Session, valuation_date: date) -> list[PositionPnL]:
        """Classify, price and value. Raises before anything is written."""
        trades = self._repository.load_trades(db, up_to=valuation_date)
        open_positions = self._classifier.classify(trades, valuation_date)

        if not open_positions:
            logger.info(f"No open positions as of {valuation_date}")
            return []

        lookup = CurvePriceLookup(valuation_date, self._repository.load_curve(db, valuation_date))
        priced = lookup.resolve(open_positions)
        return self._pnl_calculator.calculate_all(priced)

    def _reversal_for(self, db: Session, year_month: YearMonth) -> Decimal:
        """Negated net PnL of the immediately preceding month, 0 if never valued."""
        previous = self._repository.get_latest_monthly(db, year_month.previous())
        if previous is None:
            logger.debug(f"No monthly valuation for {year_month.previous()}, reversal is 0")
            return Decimal("0.00")
        return (-Decimal(previous.net_pnl)).quantize(CENT)

    def _begin_consistent_read(self, db: Session) -> None:
        """
        Pin the run's transaction to the configured isolation level.

        Only possible before the session has started a transaction, and not
        on SQLite (which serializes writers anyway).
        """
        if db.get_bind().dialect.name == "sqlite":
            return
        if db.in_transaction():
            logger.debug("Session already in a transaction, keeping its isolation level")
            return
        db.connection(execution_options={"isolation_level": self._isolation_level})


# =============================================================================
# ROW MAPPERS
# =============================================================================

def monthly_result_from_row(
        row: MonthlyPnL,
        positions: list[PositionPnL] | None = None,
) -> MonthlyValuationResult:
    return MonthlyValuationResult(
        id=row.id,
        valuation_date=row.valuation_date,
        year_month=row.year_month,
        unrealized_pnl=Decimal(row.unrealized_pnl),
        reversal_pnl=Decimal(row.reversal_pnl) if row.reversal_pnl is not None else None,
        net_pnl=Decimal(row.net_pnl),
        position_count=row.position_count,
        created_at=row.created_at,
        positions=tuple(positions or ()),
    )


def daily_result_from_row(
        row: DailyPnL,
        positions: list[PositionPnL] | None = None,
) -> DailyValuationResult:
    return DailyValuationResult(
        id=row.id,
        valuation_date=row.valuation_date,
        realized_pnl=Decimal(row.realized_pnl),
        unrealized_pnl=Decimal(row.unrealized_pnl),
        total_pnl=Decimal(row.total_pnl),
        position_count=row.position_count,
        created_at=row.created_at,
        positions=tuple(positions or ()),
    )
