# backend/tindesk/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

- errors: Error response envelope
- pagination: Pagination metadata for list endpoints
- valuation: Valuation runs, results and history
- market: Trade book and futures curve (read-only)
"""

from tindesk.schemas.errors import ErrorDetail, ValidationErrorDetail
from tindesk.schemas.market import (
    TradeResponse,
    TradeListResponse,
    CurvePointResponse,
    CurveResponse,
)
from tindesk.schemas.pagination import PaginationMeta
from tindesk.schemas.valuation import (
    ValuationDateRequest,
    ValuationRunRequest,
    OpenPositionDetail,
    PositionValuationDetail,
    OpenPositionsResponse,
    MonthlyValuationResponse,
    DailyValuationResponse,
    MonthlyValuationListResponse,
    DailyValuationListResponse,
)

__all__ = [
    "ErrorDetail",
    "ValidationErrorDetail",
    "PaginationMeta",
    "TradeResponse",
    "TradeListResponse",
    "CurvePointResponse",
    "CurveResponse",
    "ValuationDateRequest",
    "ValuationRunRequest",
    "OpenPositionDetail",
    "PositionValuationDetail",
    "OpenPositionsResponse",
    "MonthlyValuationResponse",
    "DailyValuationResponse",
    "MonthlyValuationListResponse",
    "DailyValuationListResponse",
]
