"""Core module - configuration and observability.

This module is intentionally SAP-API-agnostic.

API-specific logic (Profit Center reads, OData formatting, etc.) belongs in /connectors/.
"""

__version__ = "1.0.0"
