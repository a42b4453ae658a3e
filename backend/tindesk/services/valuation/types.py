# backend/tindesk/services/valuation/types.py
"""
Internal data types for the Valuation Service.

These dataclasses are used internally by the valuation calculators.
They are NOT Pydantic schemas - those are defined in tindesk/schemas/valuation.py
for API serialization.

Design Principles:
- Immutable (frozen=True): a run's inputs and outputs never change after creation
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for valuation dates
- Optional fields use None, not sentinel values

Type Hierarchy:
    TradeRecord             - A trade as read from storage, contract month parsed
    OpenPosition            - A trade still exposed to price risk, with its tenor
    PositionPnL             - Priced open position
    MonthlyValuationResult  - Persisted monthly valuation (+ position breakdown)
    DailyValuationResult    - Persisted daily valuation (+ position breakdown)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from tindesk.models import TradeDirection
from tindesk.services.valuation.periods import ContractMonth


# =============================================================================
# TRADES & POSITIONS
# =============================================================================

@dataclass(frozen=True)
class TradeRecord:
    """
    A trade as the valuation engine sees it.

    Attributes:
        trade_id: Database ID of the trade
        trade_date: Execution date
        contract_month: Parsed delivery month
        direction: BUY or SELL
        quantity: Metric tons (> 0)
        trade_price: USD per ton (> 0)
        counterparty: Optional counterparty reference
    """

    trade_id: int
    trade_date: date
    contract_month: ContractMonth
    direction: TradeDirection
    quantity: Decimal
    trade_price: Decimal
    counterparty: str | None = None

    @property
    def sign(self) -> int:
        """+1 for a buy, -1 for a sell."""
        return 1 if self.direction == TradeDirection.BUY else -1


@dataclass(frozen=True)
class OpenPosition:
    """
    A trade whose delivery month has not started as of the valuation date.

    Only exists within a single valuation run.
    """

    trade: TradeRecord
    tenor_months: int


@dataclass(frozen=True)
class PositionPnL:
    """
    Mark-to-market result for one open position.

    Attributes:
        position: The open position that was priced
        curve_price: Curve price used for (valuation date, tenor)
        unrealized_pnl: sign × (curve_price − trade_price) × quantity
    """

    position: OpenPosition
    curve_price: Decimal
    unrealized_pnl: Decimal


# =============================================================================
# RUN RESULTS
# =============================================================================

@dataclass(frozen=True)
class MonthlyValuationResult:
    """
    Outcome of a successful monthly run.

    reversal_pnl is None only for rows read back from storage that were
    written without one; runs always write a number (0 when no prior month).
    """

    valuation_date: date
    year_month: str
    unrealized_pnl: Decimal
    reversal_pnl: Decimal | None
    net_pnl: Decimal
    position_count: int
    id: int | None = None
    created_at: datetime | None = None
    positions: tuple[PositionPnL, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DailyValuationResult:
    """Outcome of a successful daily run."""

    valuation_date: date
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    position_count: int
    id: int | None = None
    created_at: datetime | None = None
    positions: tuple[PositionPnL, ...] = field(default_factory=tuple)
