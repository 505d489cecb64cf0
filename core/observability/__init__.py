"""
Observability Module for SAP Profit Center reads

Provides:
- Structured logging with correlation IDs (per fetch branch)
"""

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    CorrelatedLogger,
    with_correlation,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "CorrelatedLogger",
    "with_correlation",
]
