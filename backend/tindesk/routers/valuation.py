# backend/tindesk/routers/valuation.py
"""
Valuation endpoints.

Runs and reports mark-to-market valuations of the tin book:
- POST /valuation/calculate - Run the cycle named in the body
- POST /valuation/monthly - Run the monthly cycle (with reversal)
- POST /valuation/daily - Run the daily cycle
- GET /valuation/monthly - Stored monthly valuations
- GET /valuation/daily - Stored daily valuations
- GET /valuation/open-positions - Undelivered trades as of a date

Runs return 201 with the stored record plus a per-position breakdown; the
breakdown itself is not stored.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from tindesk.database import get_db
from tindesk.dependencies import get_valuation_service, get_valuation_query_service
from tindesk.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_VALUATION
from tindesk.schemas.pagination import PaginationMeta
from tindesk.schemas.valuation import (
    ValuationDateRequest,
    ValuationRunRequest,
    OpenPositionDetail,
    OpenPositionsResponse,
    MonthlyValuationResponse,
    DailyValuationResponse,
    MonthlyValuationListResponse,
    DailyValuationListResponse,
)
from tindesk.services.constants import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT
from tindesk.services.exceptions import ValidationError
from tindesk.services.valuation import ValuationService, ValuationQueryService, YearMonth
from tindesk.services.valuation.types import MonthlyValuationResult

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/valuation",
    tags=["Valuation"],
)


def _check_date_range(from_date: date | None, to_date: date | None) -> None:
    if from_date is not None and to_date is not None and from_date > to_date:
        raise ValidationError(
            f"from_date ({from_date}) must not be after to_date ({to_date})",
            field="from_date",
        )


# =============================================================================
# RUN ENDPOINTS
# =============================================================================

@router.post(
    "/calculate",
    response_model=MonthlyValuationResponse | DailyValuationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Run a valuation",
    response_description="The stored valuation with per-position breakdown",
)
@limiter.limit(RATE_LIMIT_VALUATION)
def calculate_valuation(
        request: Request,  # Required for rate limiting
        payload: ValuationRunRequest,
        db: Session = Depends(get_db),
        service: ValuationService = Depends(get_valuation_service),
) -> MonthlyValuationResponse | DailyValuationResponse:
    """
    Run the monthly or daily valuation for a date (default: today).

    A run is all-or-nothing: either one record is stored or nothing is.

    Raises:
    - **400** if any open position has no curve price (every missing
      contract month / tenor pair is listed in `details.missing`)
    - **409** if the period is already valued
    - **422** if a trade's contract month is malformed
    """
    valuation_date = payload.valuation_date or date.today()
    result = service.run_valuation(db, payload.type, valuation_date)
    if isinstance(result, MonthlyValuationResult):
        return MonthlyValuationResponse.from_result(result)
    return DailyValuationResponse.from_result(result)


@router.post(
    "/monthly",
    response_model=MonthlyValuationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Run the monthly valuation",
)
@limiter.limit(RATE_LIMIT_VALUATION)
def run_monthly_valuation(
        request: Request,  # Required for rate limiting
        payload: ValuationDateRequest | None = None,
        db: Session = Depends(get_db),
        service: ValuationService = Depends(get_valuation_service),
) -> MonthlyValuationResponse:
    """
    Value open positions for the month of `valuation_date` (default: today).

    `net_pnl` = `reversal_pnl` + `unrealized_pnl`, where the reversal is the
    negated net PnL of the previous calendar month (0 if it was never valued).
    """
    valuation_date = (payload.valuation_date if payload else None) or date.today()
    result = service.run_monthly_valuation(db, valuation_date)
    return MonthlyValuationResponse.from_result(result)


@router.post(
    "/daily",
    response_model=DailyValuationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Run the daily valuation",
)
@limiter.limit(RATE_LIMIT_VALUATION)
def run_daily_valuation(
        request: Request,  # Required for rate limiting
        payload: ValuationDateRequest | None = None,
        db: Session = Depends(get_db),
        service: ValuationService = Depends(get_valuation_service),
) -> DailyValuationResponse:
    """Value open positions as of `valuation_date` (default: today)."""
    valuation_date = (payload.valuation_date if payload else None) or date.today()
    result = service.run_daily_valuation(db, valuation_date)
    return DailyValuationResponse.from_result(result)


# =============================================================================
# READ ENDPOINTS
# =============================================================================

@router.get(
    "/monthly",
    response_model=MonthlyValuationListResponse,
    summary="List monthly valuations",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_monthly_valuations(
        request: Request,  # Required for rate limiting
        year_month: str | None = Query(
            default=None,
            description="Accounting month, YYYY-MM"
        ),
        from_date: date | None = Query(default=None, description="Earliest valuation date"),
        to_date: date | None = Query(default=None, description="Latest valuation date"),
        skip: int = Query(default=0, ge=0),
        limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
        db: Session = Depends(get_db),
        service: ValuationQueryService = Depends(get_valuation_query_service),
) -> MonthlyValuationListResponse:
    """Stored monthly valuations, newest year-month first."""
    _check_date_range(from_date, to_date)
    month = YearMonth.parse(year_month) if year_month is not None else None

    results, total = service.list_monthly(
        db,
        year_month=month,
        from_date=from_date,
        to_date=to_date,
        skip=skip,
        limit=limit,
    )
    return MonthlyValuationListResponse(
        items=[MonthlyValuationResponse.from_result(r) for r in results],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.get(
    "/daily",
    response_model=DailyValuationListResponse,
    summary="List daily valuations",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_daily_valuations(
        request: Request,  # Required for rate limiting
        from_date: date | None = Query(default=None, description="Earliest valuation date"),
        to_date: date | None = Query(default=None, description="Latest valuation date"),
        skip: int = Query(default=0, ge=0),
        limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
        db: Session = Depends(get_db),
        service: ValuationQueryService = Depends(get_valuation_query_service),
) -> DailyValuationListResponse:
    """Stored daily valuations, newest first."""
    _check_date_range(from_date, to_date)

    results, total = service.list_daily(
        db,
        from_date=from_date,
        to_date=to_date,
        skip=skip,
        limit=limit,
    )
    return DailyValuationListResponse(
        items=[DailyValuationResponse.from_result(r) for r in results],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.get(
    "/open-positions",
    response_model=OpenPositionsResponse,
    summary="List open positions",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_open_positions(
        request: Request,  # Required for rate limiting
        valuation_date: date | None = Query(
            default=None,
            description="Valuation date (default: today)"
        ),
        db: Session = Depends(get_db),
        service: ValuationService = Depends(get_valuation_service),
) -> OpenPositionsResponse:
    """
    Trades dated on or before `valuation_date` whose delivery month has not
    started, with their tenor. Nothing is priced or stored.
    """
    valuation_date = valuation_date or date.today()
    positions = service.get_open_positions(db, valuation_date)
    return OpenPositionsResponse(
        valuation_date=valuation_date,
        position_count=len(positions),
        positions=[OpenPositionDetail.from_position(p) for p in positions],
    )
