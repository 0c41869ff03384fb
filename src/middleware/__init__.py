"""Middleware components for the inheritance tax service.

Provides:
- Request ID tracking
- Logging context enrichment
"""

from .request_context import (
    RequestContextMiddleware,
    get_request_id,
    request_id_context,
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_id",
    "request_id_context",
]
