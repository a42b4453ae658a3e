# backend/tindesk/routers/__init__.py
"""
API routers for the tin desk valuation service.

- valuation: Valuation runs, history and open positions
- trades: Trade book (read-only)
- curve: Futures curve (read-only)
- health: Service info and probes
"""

from tindesk.routers.curve import router as curve_router
from tindesk.routers.health import router as health_router
from tindesk.routers.trades import router as trades_router
from tindesk.routers.valuation import router as valuation_router

__all__ = [
    "valuation_router",
    "trades_router",
    "curve_router",
    "health_router",
]
