"""
Clinic Gateway - Backend Call Metrics
=====================================
Prometheus metrics for traffic from the gateway to the clinic backend.

Tracks:
- Request latency by endpoint and status
- Retrying-fetch attempts by outcome
- Fallback responses returned after retry exhaustion
- Transport errors

Usage:
    from clinic_gateway.metrics import get_metrics_app

    app.mount("/metrics", get_metrics_app())
"""

from .prometheus_definitions import (
    GATEWAY_REGISTRY,
    BACKEND_REQUEST_LATENCY,
    BACKEND_FETCH_ATTEMPTS,
    BACKEND_FETCH_FALLBACKS,
    BACKEND_ERRORS,
)

from .recording import (
    record_backend_call,
    record_fetch_attempt,
    record_fetch_fallback,
    record_error,
    get_metrics_app,
)

__all__ = [
    # Prometheus
    "GATEWAY_REGISTRY",
    "BACKEND_REQUEST_LATENCY",
    "BACKEND_FETCH_ATTEMPTS",
    "BACKEND_FETCH_FALLBACKS",
    "BACKEND_ERRORS",
    # Recording
    "record_backend_call",
    "record_fetch_attempt",
    "record_fetch_fallback",
    "record_error",
    "get_metrics_app",
]
