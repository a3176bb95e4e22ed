"""
Retry Backoff
=============
Backoff policy shared by every retried backend call.
"""

from .backoff import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_INITIAL_DELAY_MS,
    DEFAULT_GROWTH_FACTOR,
    DEFAULT_MAX_JITTER_MS,
    RetryPolicy,
    RateLimitBackoff,
    backoff_delay_ms,
    parse_retry_after,
)

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_INITIAL_DELAY_MS",
    "DEFAULT_GROWTH_FACTOR",
    "DEFAULT_MAX_JITTER_MS",
    "RetryPolicy",
    "RateLimitBackoff",
    "backoff_delay_ms",
    "parse_retry_after",
]
