"""
Clinic Gateway Logging

Structured JSON logging shared by stdlib and structlog loggers.
"""

from .structured import (
    JSONFormatter,
    RequestLoggingMiddleware,
    log_audit,
    log_error,
    setup_logging,
)

__all__ = [
    "JSONFormatter",
    "RequestLoggingMiddleware",
    "log_audit",
    "log_error",
    "setup_logging",
]
