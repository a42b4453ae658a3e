# backend/tindesk/dependencies.py
"""
Dependency injection module for FastAPI services.

Services are stateless apart from their collaborators, so one instance of
each is shared across all requests. They are created lazily on first use to
avoid import-time side effects.

Usage in routers:
    from tindesk.dependencies import get_valuation_service

    @router.post("/monthly")
    def run_monthly(
        db: Session = Depends(get_db),
        service: ValuationService = Depends(get_valuation_service),
    ):
        ...

Tests override these with app.dependency_overrides, like get_db.
"""

from functools import lru_cache

from tindesk.services.market import MarketQueryService
from tindesk.services.valuation import ValuationService, ValuationQueryService
from tindesk.services.valuation.repository import SqlValuationRepository


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================

@lru_cache(maxsize=1)
def get_valuation_repository() -> SqlValuationRepository:
    return SqlValuationRepository()


@lru_cache(maxsize=1)
def get_valuation_service() -> ValuationService:
    """Valuation runs, backed by the shared repository."""
    return ValuationService(repository=get_valuation_repository())


@lru_cache(maxsize=1)
def get_valuation_query_service() -> ValuationQueryService:
    return ValuationQueryService()


@lru_cache(maxsize=1)
def get_market_query_service() -> MarketQueryService:
    return MarketQueryService()
