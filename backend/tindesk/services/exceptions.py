# backend/tindesk/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer (global handlers in main.py) maps them to HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── NotFoundError
    ├── StorageError
    └── ValuationError
        ├── MalformedContractMonthError
        ├── MissingCurveDataError
        └── DuplicateValuationError

Every ValuationError is terminal for the run that raised it: nothing has
been written when it reaches the caller.
"""

from datetime import date


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when programmatic input validation fails.

    Request bodies are validated by Pydantic; this covers values reaching the
    service from other callers (CLI, scheduler), e.g. a bad date string.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "CurvePoint")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(ServiceError):
    """
    Raised when the database fails for reasons other than a duplicate key.

    Connectivity loss, unexpected constraint violations, etc. The run that
    hit it has been rolled back.

    Attributes:
        operation: What the service was doing when storage failed
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage failure during {operation}: {reason}")


# =============================================================================
# VALUATION ERRORS
# =============================================================================


class ValuationError(ServiceError):
    """Base exception for valuation run failures."""
    pass


class MalformedContractMonthError(ValuationError):
    """
    Raised when a contract month token is not of the form "YYYY-Mmm".

    Attributes:
        token: The raw token as stored
        trade_id: Trade carrying the token, when known
    """

    def __init__(self, token: str, trade_id: int | None = None) -> None:
        self.token = token
        self.trade_id = trade_id
        message = f"Invalid contract month '{token}': expected format YYYY-Mmm (e.g. 2026-M03)"
        if trade_id is not None:
            message += f" on trade {trade_id}"
        super().__init__(message)


class MissingCurveDataError(ValuationError):
    """
    Raised when one or more open positions have no curve price.

    The message lists every missing pair so ingestion can be fixed in one go.

    Attributes:
        valuation_date: Curve as-of date that was searched
        missing: (contract month label, tenor months) pairs without a price
    """

    def __init__(self, valuation_date: date, missing: list[tuple[str, int]]) -> None:
        self.valuation_date = valuation_date
        self.missing = missing
        pairs = ", ".join(f"{month} ({tenor}M)" for month, tenor in missing)
        super().__init__(
            f"Futures curve data missing for {valuation_date.isoformat()}: {pairs}"
        )


class DuplicateValuationError(ValuationError):
    """
    Raised when a valuation already exists for the requested key.

    An operator error (re-run of an already valued period), not a fault.

    Attributes:
        cycle: "monthly" or "daily"
        key: year-month label or ISO valuation date
    """

    def __init__(self, cycle: str, key: str) -> None:
        self.cycle = cycle
        self.key = key
        super().__init__(f"A {cycle} valuation already exists for {key}")


__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "ValuationError",
    "MalformedContractMonthError",
    "MissingCurveDataError",
    "DuplicateValuationError",
]
