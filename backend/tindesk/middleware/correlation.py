# backend/tindesk/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For each request the correlation ID is taken from X-Correlation-ID, else
X-Request-ID, else generated. It is bound for the request (so every log line
carries it) and echoed back in the X-Correlation-ID response header, which
lets an operator tie a failed valuation response to its log lines.
"""

import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tindesk.utils.context import set_correlation_id, clear_correlation_id, new_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID per request and returns it in the response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER)
            or request.headers.get(REQUEST_ID_HEADER)
            or new_correlation_id()
        )
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()
