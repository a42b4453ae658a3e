# backend/tindesk/utils/__init__.py
"""
Cross-cutting utilities.

- logging: Logging setup with correlation ID support
- context: Correlation ID storage for requests and CLI runs

Usage:
    from tindesk.utils import setup_logging
    from tindesk.utils import get_correlation_id, correlation_scope
"""

from tindesk.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    new_correlation_id,
    correlation_scope,
)
from tindesk.utils.logging import setup_logging

__all__ = [
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "new_correlation_id",
    "correlation_scope",
]
