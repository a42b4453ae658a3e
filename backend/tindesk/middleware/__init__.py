# backend/tindesk/middleware/__init__.py
"""
ASGI middleware: correlation ID tracking and rate limiting.

Usage:
    from tindesk.middleware import CorrelationIdMiddleware, limiter

    app.add_middleware(CorrelationIdMiddleware)
    app.state.limiter = limiter
"""

from tindesk.middleware.correlation import CorrelationIdMiddleware
from tindesk.middleware.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_VALUATION,
    RATE_LIMIT_HEALTH,
)

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_VALUATION",
    "RATE_LIMIT_HEALTH",
]
