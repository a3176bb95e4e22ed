"""
Clinic Gateway
==============
Patient and admin API gateway for the clinic backend.

Features:
- Retrying fetch with rate-limit aware exponential backoff
- Proxy routes for registration, booking and appointment lookups
- Admin dashboard feeds with passkey lockout
- Structured JSON logging and Prometheus metrics
"""

__version__ = "1.0.0"

from .config import GatewayConfig, get_config
from .http import (
    BackendClient,
    BackendError,
    RequestOptions,
    fetch_with_retry,
    is_fallback_response,
)
from .retry import RetryPolicy

__all__ = [
    "__version__",
    "GatewayConfig",
    "get_config",
    "BackendClient",
    "BackendError",
    "RequestOptions",
    "fetch_with_retry",
    "is_fallback_response",
    "RetryPolicy",
]
