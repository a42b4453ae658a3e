# backend/tindesk/routers/trades.py
"""
Trade book endpoints (read-only).

- GET /trades - Trades, newest first, with optional filters

Trades are captured by another system; the valuation engine only reads them.
"""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from tindesk.database import get_db
from tindesk.dependencies import get_market_query_service
from tindesk.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT
from tindesk.models import Trade, TradeDirection
from tindesk.schemas.market import TradeResponse, TradeListResponse
from tindesk.schemas.pagination import PaginationMeta
from tindesk.services.constants import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT
from tindesk.services.market import MarketQueryService

router = APIRouter(
    prefix="/trades",
    tags=["Trades"],
)


def _map_trade(trade: Trade) -> TradeResponse:
    return TradeResponse(
        id=trade.id,
        trade_date=trade.trade_date,
        contract_month=trade.contract_month,
        buy_sell=trade.buy_sell.value,
        quantity_mt=trade.quantity_mt,
        price_usd=trade.price_usd,
        counterparty=trade.counterparty,
        created_at=trade.created_at,
    )


@router.get(
    "",
    response_model=TradeListResponse,
    summary="List trades",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_trades(
        request: Request,  # Required for rate limiting
        to_date: date | None = Query(default=None, description="Only trades dated on or before"),
        contract_month: str | None = Query(
            default=None,
            description="Delivery month, YYYY-Mmm (e.g. 2026-M06)"
        ),
        buy_sell: Literal["BUY", "SELL"] | None = Query(default=None),
        skip: int = Query(default=0, ge=0),
        limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
        db: Session = Depends(get_db),
        service: MarketQueryService = Depends(get_market_query_service),
) -> TradeListResponse:
    """
    Trades, newest trade date first.

    Raises **422** if `contract_month` is not a YYYY-Mmm token.
    """
    trades, total = service.list_trades(
        db,
        to_date=to_date,
        contract_month=contract_month,
        direction=TradeDirection(buy_sell) if buy_sell else None,
        skip=skip,
        limit=limit,
    )
    return TradeListResponse(
        items=[_map_trade(t) for t in trades],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )
