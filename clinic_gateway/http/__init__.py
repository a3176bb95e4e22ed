from .client import BackendClient
from .exceptions import (
    BackendError,
    BackendUnavailableError,
    BackendTimeoutError,
)
from .retry_fetch import (
    FALLBACK_HEADER,
    RequestOptions,
    build_fallback_response,
    fetch_with_retry,
    is_fallback_response,
)

__all__ = [
    "BackendClient",
    "BackendError",
    "BackendUnavailableError",
    "BackendTimeoutError",
    "FALLBACK_HEADER",
    "RequestOptions",
    "build_fallback_response",
    "fetch_with_retry",
    "is_fallback_response",
]
