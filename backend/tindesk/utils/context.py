# backend/tindesk/utils/context.py
"""
Request context for log correlation.

Holds the correlation ID of the current HTTP request or CLI run in a
contextvar, so it follows the call through sync and async code without being
passed around.

Usage:
    from tindesk.utils.context import get_correlation_id, correlation_scope

    # HTTP: set by CorrelationIdMiddleware
    # CLI / scheduler:
    with correlation_scope() as run_id:
        service.run_daily_valuation(db, "2026-03-16")
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request / run, or None outside one."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)


def new_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Bind a correlation ID for the duration of a block.

    Restores the previous value on exit, so scopes nest.

    Args:
        correlation_id: ID to use (default: a fresh UUID)

    Yields:
        The bound correlation ID
    """
    value = correlation_id or new_correlation_id()
    token = _correlation_id_var.set(value)
    try:
        yield value
    finally:
        _correlation_id_var.reset(token)
