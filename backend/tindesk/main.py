# backend/tindesk/main.py
"""
FastAPI application entry point.

Wires logging, middleware, the error envelope and the routers together.

Run with:
    uvicorn tindesk.main:app --app-dir backend
"""

import logging
from collections.abc import Callable
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from tindesk import __version__
from tindesk.config import settings
from tindesk.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
)
from tindesk.routers import valuation_router, trades_router, curve_router, health_router
from tindesk.schemas.errors import ErrorDetail, ValidationErrorDetail
from tindesk.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    StorageError,
    MalformedContractMonthError,
    MissingCurveDataError,
    DuplicateValuationError,
)
from tindesk.utils import setup_logging

logger = logging.getLogger(__name__)

# Before the app exists, so startup messages are formatted too
setup_logging()

app = FastAPI(
    title=settings.app_name,
    description="Mark-to-market valuation of the tin trading book",
    version=__version__,
    debug=settings.debug,
)

# =============================================================================
# MIDDLEWARE (last added = outermost)
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Outermost, so every log line of a request carries its correlation ID
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# ERROR ENVELOPE
# =============================================================================
# Services raise domain exceptions; each maps to a status code and a details
# payload here. Starlette resolves handlers through the exception's MRO, so
# ServiceError catches whatever has no entry of its own.
# =============================================================================

DetailsBuilder = Callable[[ServiceError], dict | None]


def _no_details(exc: ServiceError) -> None:
    return None


def _missing_curve_details(exc: MissingCurveDataError) -> dict:
    return {
        "valuation_date": exc.valuation_date.isoformat(),
        "missing": [
            {"contract_month": contract_month, "tenor_months": tenor}
            for contract_month, tenor in exc.missing
        ],
    }


def _not_found_details(exc: NotFoundError) -> dict | None:
    if not exc.resource_type:
        return None
    return {"resource_type": exc.resource_type, "resource_id": exc.resource_id}


ERROR_RESPONSES: list[tuple[type[ServiceError], int, DetailsBuilder]] = [
    (
        MalformedContractMonthError,
        422,
        lambda exc: {"contract_month": exc.token, "trade_id": exc.trade_id},
    ),
    (MissingCurveDataError, 400, _missing_curve_details),
    (DuplicateValuationError, 409, lambda exc: {"type": exc.cycle, "key": exc.key}),
    (ValidationError, 400, lambda exc: {"field": exc.field} if exc.field else None),
    (NotFoundError, 404, _not_found_details),
    (StorageError, 503, lambda exc: {"operation": exc.operation}),
    (ServiceError, 500, _no_details),
]


def _service_error_handler(status_code: int, build_details: DetailsBuilder):
    log_level = logging.ERROR if status_code >= 500 else logging.WARNING

    async def handler(request: Request, exc: ServiceError) -> JSONResponse:
        logger.log(
            log_level,
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        )
        return JSONResponse(
            status_code=status_code,
            content=ErrorDetail(
                error=type(exc).__name__,
                message=str(exc),
                details=build_details(exc),
            ).model_dump(),
        )

    return handler


for exc_class, status_code, build_details in ERROR_RESPONSES:
    app.add_exception_handler(exc_class, _service_error_handler(status_code, build_details))

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _http_error_name(status_code: int) -> str:
    """404 -> "NotFoundError", 405 -> "MethodNotAllowedError", ..."""
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTPError"
    return phrase.title().replace(" ", "").replace("-", "") + "Error"


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=_http_error_name(exc.status_code),
            message=str(exc.detail),
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body / query validation failures (422), one entry per offending field."""
    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=[
                {
                    "field": ".".join(str(part) for part in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
                for error in exc.errors()
            ],
        ).model_dump(),
    )


# =============================================================================
# ROUTERS
# =============================================================================

app.include_router(health_router)  # /, /health*
app.include_router(valuation_router)  # /valuation/*
app.include_router(trades_router)  # /trades
app.include_router(curve_router)  # /curve
