# backend/tindesk/schemas/valuation.py
"""
Pydantic schemas for valuation runs and valuation history.

These schemas handle:
- Run requests (monthly / daily, optional valuation date)
- Run results with per-position breakdown
- Stored valuation listings
- Open position previews

Amounts are USD Decimals and serialize as strings in JSON.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from tindesk.schemas.pagination import PaginationMeta

if TYPE_CHECKING:
    from tindesk.services.valuation.types import (
        DailyValuationResult,
        MonthlyValuationResult,
        OpenPosition,
        PositionPnL,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ValuationDateRequest(BaseModel):
    """Body of POST /valuation/monthly and /valuation/daily."""

    valuation_date: dt.date | None = Field(
        default=None,
        description="Valuation date, ISO format (default: today)"
    )


class ValuationRunRequest(ValuationDateRequest):
    """Body of POST /valuation/calculate."""

    type: Literal["monthly", "daily"] = Field(
        ...,
        description="Valuation cycle to run"
    )


# =============================================================================
# POSITION SCHEMAS
# =============================================================================

class OpenPositionDetail(BaseModel):
    """An undelivered trade as of the valuation date."""

    trade_id: int
    trade_date: dt.date
    contract_month: str = Field(..., description="Delivery month, e.g. '2026-M06'")
    buy_sell: Literal["BUY", "SELL"]
    quantity_mt: Decimal = Field(..., description="Quantity in metric tons")
    trade_price_usd: Decimal = Field(..., description="Trade price, USD per ton")
    counterparty: str | None = None
    tenor_months: int = Field(..., ge=0, description="Months from valuation month to delivery month")

    @classmethod
    def from_position(cls, position: OpenPosition) -> OpenPositionDetail:
        trade = position.trade
        return cls(
            trade_id=trade.trade_id,
            trade_date=trade.trade_date,
            contract_month=trade.contract_month.token,
            buy_sell=trade.direction.value,
            quantity_mt=trade.quantity,
            trade_price_usd=trade.trade_price,
            counterparty=trade.counterparty,
            tenor_months=position.tenor_months,
        )


class PositionValuationDetail(OpenPositionDetail):
    """An open position priced against the curve."""

    curve_price_usd: Decimal = Field(..., description="Curve price used for the position's tenor")
    unrealized_pnl: Decimal = Field(..., description="sign × (curve − trade price) × quantity")

    @classmethod
    def from_result(cls, result: PositionPnL) -> PositionValuationDetail:
        return cls(
            **OpenPositionDetail.from_position(result.position).model_dump(),
            curve_price_usd=result.curve_price,
            unrealized_pnl=result.unrealized_pnl,
        )


class OpenPositionsResponse(BaseModel):
    """Classification preview; nothing is priced or stored."""

    valuation_date: dt.date
    position_count: int
    positions: list[OpenPositionDetail]


# =============================================================================
# VALUATION RESULT SCHEMAS
# =============================================================================

class MonthlyValuationResponse(BaseModel):
    """A stored monthly valuation."""

    model_config = ConfigDict(from_attributes=True)

    type: Literal["monthly"] = "monthly"
    id: int | None = None
    valuation_date: dt.date
    year_month: str = Field(..., description="Accounting month, e.g. '2026-03'")
    unrealized_pnl: Decimal
    reversal_pnl: Decimal | None = Field(
        ...,
        description="Negated net PnL of the previous month (0 if it was never valued)"
    )
    net_pnl: Decimal = Field(..., description="reversal_pnl + unrealized_pnl")
    position_count: int
    created_at: dt.datetime | None = None
    positions: list[PositionValuationDetail] = Field(
        default_factory=list,
        description="Per-position breakdown (run responses only, not stored)"
    )

    @classmethod
    def from_result(cls, result: MonthlyValuationResult) -> MonthlyValuationResponse:
        return cls(
            id=result.id,
            valuation_date=result.valuation_date,
            year_month=result.year_month,
            unrealized_pnl=result.unrealized_pnl,
            reversal_pnl=result.reversal_pnl,
            net_pnl=result.net_pnl,
            position_count=result.position_count,
            created_at=result.created_at,
            positions=[PositionValuationDetail.from_result(p) for p in result.positions],
        )


class DailyValuationResponse(BaseModel):
    """A stored daily valuation."""

    model_config = ConfigDict(from_attributes=True)

    type: Literal["daily"] = "daily"
    id: int | None = None
    valuation_date: dt.date
    realized_pnl: Decimal = Field(..., description="Always 0: delivery settlement is not valued yet")
    unrealized_pnl: Decimal
    total_pnl: Decimal = Field(..., description="realized_pnl + unrealized_pnl")
    position_count: int
    created_at: dt.datetime | None = None
    positions: list[PositionValuationDetail] = Field(
        default_factory=list,
        description="Per-position breakdown (run responses only, not stored)"
    )

    @classmethod
    def from_result(cls, result: DailyValuationResult) -> DailyValuationResponse:
        return cls(
            id=result.id,
            valuation_date=result.valuation_date,
            realized_pnl=result.realized_pnl,
            unrealized_pnl=result.unrealized_pnl,
            total_pnl=result.total_pnl,
            position_count=result.position_count,
            created_at=result.created_at,
            positions=[PositionValuationDetail.from_result(p) for p in result.positions],
        )


# =============================================================================
# LIST SCHEMAS
# =============================================================================

class MonthlyValuationListResponse(BaseModel):
    """Monthly valuations, newest first."""

    items: list[MonthlyValuationResponse]
    pagination: PaginationMeta


class DailyValuationListResponse(BaseModel):
    """Daily valuations, newest first."""

    items: list[DailyValuationResponse]
    pagination: PaginationMeta
