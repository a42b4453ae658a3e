# backend/tindesk/services/__init__.py
"""
Service layer for business logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive database sessions as parameters (not via Depends)
- Are easily testable via dependency injection

Architecture:
    services/
    ├── __init__.py       # This file - main exports
    ├── exceptions.py     # Domain exceptions
    ├── constants.py      # Limits and rate-limit strings
    ├── protocols.py      # Storage interface (Protocol classes)
    ├── market.py         # Trade book and curve listings (read-only)
    └── valuation/        # Mark-to-market valuation engine
"""

from tindesk.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    StorageError,
    ValuationError,
    MalformedContractMonthError,
    MissingCurveDataError,
    DuplicateValuationError,
)
from tindesk.services.market import MarketQueryService
from tindesk.services.valuation import ValuationService, ValuationQueryService

__all__ = [
    "ValuationService",
    "ValuationQueryService",
    "MarketQueryService",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "ValuationError",
    "MalformedContractMonthError",
    "MissingCurveDataError",
    "DuplicateValuationError",
]
