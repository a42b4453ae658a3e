# backend/tindesk/schemas/market.py
"""
Pydantic schemas for the read-only trade book and futures curve endpoints.
"""

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tindesk.schemas.pagination import PaginationMeta


# =============================================================================
# TRADES
# =============================================================================

class TradeResponse(BaseModel):
    """A recorded trade."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    trade_date: dt.date
    contract_month: str = Field(..., description="Delivery month token, e.g. '2026-M06'")
    buy_sell: Literal["BUY", "SELL"]
    quantity_mt: Decimal
    price_usd: Decimal
    counterparty: str | None = None
    created_at: dt.datetime | None = None


class TradeListResponse(BaseModel):
    """Trades, newest trade date first."""

    items: list[TradeResponse]
    pagination: PaginationMeta


# =============================================================================
# FUTURES CURVE
# =============================================================================

class CurvePointResponse(BaseModel):
    """One tenor of the curve."""

    model_config = ConfigDict(from_attributes=True)

    tenor_months: int = Field(..., ge=0)
    futures_price_usd: Decimal
    price_source: str


class CurveResponse(BaseModel):
    """The curve as of one date, ordered by tenor."""

    as_of_date: dt.date
    points: list[CurvePointResponse]
