import logging
import time
from typing import Any, Dict, Optional

import httpx

from ..metrics import record_backend_call, record_error
from ..retry import RetryPolicy
from .exceptions import BackendError, BackendTimeoutError, BackendUnavailableError
from .retry_fetch import RequestOptions, Sleep, fetch_with_retry

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Async HTTP client for the clinic REST backend.

    Features:
    - Connection pooling (via httpx.AsyncClient).
    - Plain single-attempt requests with transport errors mapped to BackendError.
    - Retrying requests for the admin dashboard feeds (see fetch_with_retry).
    - HTTP error statuses are returned, never raised; routes decide what they mean.
    """

    def __init__(
        self,
        base_url: str,
        service_name: str = "clinic-backend",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_name = service_name
        self.timeout = timeout
        self._sleep = sleep

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"User-Agent": "Clinic-Gateway/1.0"},
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _map_exception(self, exc: Exception) -> BackendError:
        """Map httpx exceptions to backend exceptions."""
        if isinstance(exc, httpx.TimeoutException):
            return BackendTimeoutError("Request timed out", service=self.service_name)
        if isinstance(exc, httpx.HTTPError):
            return BackendUnavailableError(f"Failed to connect: {exc}", service=self.service_name)
        return BackendError(f"Unexpected error: {exc}", service=self.service_name)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        content: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        files: Any = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send one request; no retry."""
        kwargs: Dict[str, Any] = {"headers": headers or {}}
        if json is not None:
            kwargs["json"] = json
        if content is not None:
            kwargs["content"] = content
        if params:
            kwargs["params"] = params
        if files is not None:
            kwargs["files"] = files
        if timeout is not None:
            kwargs["timeout"] = timeout

        start = time.perf_counter()
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            mapped = self._map_exception(e)
            error_type = "timeout" if isinstance(mapped, BackendTimeoutError) else "unavailable"
            record_error(path, error_type)
            record_backend_call(method, path, error_type, time.perf_counter() - start)
            logger.error(f"{self.service_name} {method} {path} failed: {e!r}")
            raise mapped from e

        record_backend_call(method, path, str(response.status_code), time.perf_counter() - start)
        return response

    async def request_with_retry(
        self,
        method: str,
        path: str,
        *,
        policy: Optional[RetryPolicy] = None,
        headers: Optional[Dict[str, str]] = None,
        content: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send through fetch_with_retry; always returns a response."""
        options = RequestOptions(method=method, headers=headers or {}, body=content, params=params)
        return await fetch_with_retry(
            self.url(path),
            options,
            client=self.client,
            sleep=self._sleep,
            policy=policy or RetryPolicy(),
        )

    async def ping(self, path: str = "/api/health", timeout: float = 5.0) -> str:
        """Backend connectivity: connected, error or disconnected."""
        try:
            response = await self.request("GET", path, timeout=timeout)
        except BackendError:
            return "disconnected"
        return "connected" if response.is_success else "error"
