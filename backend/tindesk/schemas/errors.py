# backend/tindesk/schemas/errors.py
"""
Pydantic schemas for error responses.

Every error leaves the API in the same envelope, built by the global
exception handlers in main.py:

    {"error": "MissingCurveDataError",
     "message": "Futures curve data missing for 2026-03-15: 2026-M06 (3M)",
     "details": {"valuation_date": "2026-03-15",
                 "missing": [{"contract_month": "2026-M06", "tenor_months": 3}]}}
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error response."""

    error: str = Field(
        ...,
        description="Error type (exception class name, e.g. 'DuplicateValuationError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Structured context for the error (optional)"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation failure (422), one entry per offending field."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="List of {field, message, type}"
    )
