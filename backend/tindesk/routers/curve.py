# backend/tindesk/routers/curve.py
"""
Futures curve endpoint (read-only).

- GET /curve - Curve points for one as-of date, ordered by tenor
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from tindesk.database import get_db
from tindesk.dependencies import get_market_query_service
from tindesk.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT
from tindesk.schemas.market import CurvePointResponse, CurveResponse
from tindesk.services.market import MarketQueryService

router = APIRouter(
    prefix="/curve",
    tags=["Curve"],
)


@router.get(
    "",
    response_model=CurveResponse,
    summary="Get the futures curve",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_curve(
        request: Request,  # Required for rate limiting
        as_of_date: date | None = Query(
            default=None,
            description="Curve date (default: latest date with data)"
        ),
        db: Session = Depends(get_db),
        service: MarketQueryService = Depends(get_market_query_service),
) -> CurveResponse:
    """
    The futures curve as of `as_of_date`.

    Raises **404** if there are no curve points for the date.
    """
    curve_date, points = service.get_curve(db, as_of_date)
    return CurveResponse(
        as_of_date=curve_date,
        points=[CurvePointResponse.model_validate(p) for p in points],
    )
