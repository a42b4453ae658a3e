# backend/tindesk/middleware/rate_limit.py
"""
Rate limiting with slowapi.

Valuation runs are cheap to trigger and each one writes a record, so they get
a tighter limit than reads. Limits live in tindesk/services/constants.py.

Key by: Client IP (X-Forwarded-For only from trusted proxies)
Storage: In-memory (single instance)

Usage:
    @router.post("/valuation/monthly")
    @limiter.limit(RATE_LIMIT_VALUATION)
    def run_monthly(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from tindesk.config import settings
from tindesk.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_VALUATION,
    RATE_LIMIT_HEALTH,
)

logger = logging.getLogger(__name__)

# slowapi reports limits as "10 per 1 minute"; clients get a fixed hint
DEFAULT_RETRY_AFTER_SECONDS = 60


def _get_client_ip(request: Request) -> str:
    """
    Client IP for rate-limit keys.

    Forwarded headers are honoured only when the direct peer is a trusted
    proxy, otherwise any client could pick its own key.
    """
    direct_ip = get_remote_address(request)

    if settings.trust_proxy_headers or direct_ip in settings.trusted_proxy_ips:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return direct_ip


limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """429 in the shared error envelope, with Retry-After."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"
    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": DEFAULT_RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(DEFAULT_RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_VALUATION",
    "RATE_LIMIT_HEALTH",
]
