"""
Services Module - Cross-cutting services for the inheritance tax service.

- Logging configuration and calculation audit logging
"""

from .logging_config import (
    CalculationLogger,
    configure_logging,
    get_logger,
    request_id_var,
)

__all__ = [
    "CalculationLogger",
    "configure_logging",
    "get_logger",
    "request_id_var",
]
