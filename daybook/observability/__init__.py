"""
Observability: structured logging tagged with request ids.

Usage:
    from daybook.observability import configure_logging

    configure_logging("INFO")
"""

from .logging import CorrelationIdMiddleware, configure_logging

__all__ = ["CorrelationIdMiddleware", "configure_logging"]
