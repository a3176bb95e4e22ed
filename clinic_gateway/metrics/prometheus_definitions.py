"""
Prometheus Metrics Definitions
==============================
Metric definitions for calls from the gateway to the clinic backend.
"""

from prometheus_client import CollectorRegistry, Counter, Histogram

# Custom registry so tests and multiple app instances don't collide with the default one
GATEWAY_REGISTRY = CollectorRegistry()

BACKEND_REQUEST_LATENCY = Histogram(
    name="clinic_backend_request_duration_seconds",
    documentation="Time spent on single requests to the clinic backend",
    labelnames=["method", "endpoint", "status"],
    buckets=[
        0.005, 0.01, 0.025, 0.05,
        0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0,
    ],
    registry=GATEWAY_REGISTRY,
)

# outcome: success, rate_limited, transport_error
BACKEND_FETCH_ATTEMPTS = Counter(
    name="clinic_backend_fetch_attempts_total",
    documentation="Attempts made by the retrying fetch wrapper",
    labelnames=["method", "endpoint", "outcome"],
    registry=GATEWAY_REGISTRY,
)

BACKEND_FETCH_FALLBACKS = Counter(
    name="clinic_backend_fetch_fallbacks_total",
    documentation="Retried calls that exhausted their budget and returned the empty fallback",
    labelnames=["method", "endpoint"],
    registry=GATEWAY_REGISTRY,
)

BACKEND_ERRORS = Counter(
    name="clinic_backend_errors_total",
    documentation="Transport-level errors talking to the clinic backend",
    labelnames=["endpoint", "error_type"],
    registry=GATEWAY_REGISTRY,
)
