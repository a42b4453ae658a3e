# backend/tindesk/services/valuation/__init__.py
"""
Valuation Service Package.

Mark-to-market valuation of the tin book against the futures curve:
- Monthly valuation with reversal of the prior month (run_monthly_valuation)
- Daily valuation (run_daily_valuation)
- Historical records for reporting (ValuationQueryService)

Usage:
    from tindesk.services.valuation import ValuationService

    service = ValuationService()
    monthly = service.run_monthly_valuation(db, date(2026, 3, 31))
    daily = service.run_daily_valuation(db, "2026-03-16")

Architecture:
    valuation/
    ├── __init__.py       # This file - package exports
    ├── periods.py        # ContractMonth, YearMonth, tenor arithmetic
    ├── types.py          # Internal data classes
    ├── calculators.py    # Classifier, curve lookup, unrealized PnL
    ├── repository.py     # SQLAlchemy storage boundary
    ├── service.py        # ValuationService (orchestrator)
    └── queries.py        # ValuationQueryService (read-only)

Data Flow:
    Trades (<= V) → PositionClassifier → OpenPositions (with tenor)
    OpenPositions + Curve(V) → CurvePriceLookup → priced positions
    Priced positions → UnrealizedPnLCalculator → PositionPnL, total
    Total (+ reversal for monthly) → one MonthlyPnL / DailyPnL row
"""

from tindesk.services.valuation.calculators import (
    PositionClassifier,
    CurvePriceLookup,
    UnrealizedPnLCalculator,
)
from tindesk.services.valuation.periods import (
    ContractMonth,
    YearMonth,
    calculate_tenor_months,
    parse_valuation_date,
)
from tindesk.services.valuation.queries import ValuationQueryService
from tindesk.services.valuation.repository import SqlValuationRepository
from tindesk.services.valuation.service import ValuationService, VALID_CYCLES
from tindesk.services.valuation.types import (
    TradeRecord,
    OpenPosition,
    PositionPnL,
    MonthlyValuationResult,
    DailyValuationResult,
)

__all__ = [
    # Services
    "ValuationService",
    "ValuationQueryService",
    "SqlValuationRepository",
    "VALID_CYCLES",

    # Periods
    "ContractMonth",
    "YearMonth",
    "calculate_tenor_months",
    "parse_valuation_date",

    # Data types
    "TradeRecord",
    "OpenPosition",
    "PositionPnL",
    "MonthlyValuationResult",
    "DailyValuationResult",

    # Calculators (for testing)
    "PositionClassifier",
    "CurvePriceLookup",
    "UnrealizedPnLCalculator",
]
