"""
Metrics Recording Functions
===========================
Functions for recording backend call metrics.
"""

import re
from urllib.parse import urlsplit

from prometheus_client import make_asgi_app

from .prometheus_definitions import (
    GATEWAY_REGISTRY,
    BACKEND_REQUEST_LATENCY,
    BACKEND_FETCH_ATTEMPTS,
    BACKEND_FETCH_FALLBACKS,
    BACKEND_ERRORS,
)


def record_backend_call(method: str, url: str, status: str, duration_seconds: float):
    """
    Record latency and count for one request to the backend.

    Args:
        method: HTTP method
        url: Full URL or path of the request
        status: Response status code, or an error label (timeout, unavailable)
        duration_seconds: Request duration in seconds
    """
    BACKEND_REQUEST_LATENCY.labels(
        method=method.upper(),
        endpoint=_normalize_endpoint(url),
        status=status,
    ).observe(duration_seconds)


def record_fetch_attempt(method: str, url: str, outcome: str):
    BACKEND_FETCH_ATTEMPTS.labels(
        method=method.upper(),
        endpoint=_normalize_endpoint(url),
        outcome=outcome,
    ).inc()


def record_fetch_fallback(method: str, url: str):
    BACKEND_FETCH_FALLBACKS.labels(
        method=method.upper(),
        endpoint=_normalize_endpoint(url),
    ).inc()


def record_error(url: str, error_type: str):
    """Record a transport-level backend error."""
    BACKEND_ERRORS.labels(
        endpoint=_normalize_endpoint(url),
        error_type=error_type,
    ).inc()


def get_metrics_app():
    """
    Get ASGI app for the /metrics endpoint.

    Usage:
        app.mount("/metrics", get_metrics_app())
    """
    return make_asgi_app(registry=GATEWAY_REGISTRY)


def _normalize_endpoint(endpoint: str) -> str:
    """
    Normalize endpoint to reduce cardinality.

    Drops scheme, host and query, then replaces Mongo ObjectIds, UUIDs and
    numeric ids with placeholders.
    """
    endpoint = urlsplit(endpoint).path or "/"

    # Replace UUIDs
    endpoint = re.sub(
        r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
        '{uuid}',
        endpoint,
        flags=re.IGNORECASE,
    )

    # Replace 24-char ObjectIds
    endpoint = re.sub(r'/[0-9a-f]{24}(?=/|$)', '/{id}', endpoint, flags=re.IGNORECASE)

    # Replace numeric IDs in path segments
    endpoint = re.sub(r'/\d+(?=/|$)', '/{id}', endpoint)

    return endpoint
