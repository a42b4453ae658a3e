# backend/tindesk/services/constants.py
"""
Centralized constants for the tin desk services.

Usage:
    from tindesk.services.constants import RATE_LIMIT_VALUATION, MAX_LIST_LIMIT
"""


# =============================================================================
# RATE LIMITING
# =============================================================================
# slowapi limit strings, keyed by client IP

# Reads (valuation history, trades, curve)
RATE_LIMIT_DEFAULT: str = "100/minute"

# Valuation runs; each one writes a record, normally once per period
RATE_LIMIT_VALUATION: str = "10/minute"

# Health probes from load balancers / orchestrators
RATE_LIMIT_HEALTH: str = "300/minute"


# =============================================================================
# LIST ENDPOINTS
# =============================================================================

DEFAULT_LIST_LIMIT: int = 100
MAX_LIST_LIMIT: int = 1000
