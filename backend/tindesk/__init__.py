# backend/tindesk/__init__.py
"""Tin desk valuation backend."""

__version__ = "0.1.0"
