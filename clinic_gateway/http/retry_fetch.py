"""
Retrying Fetch
==============
HTTP request with bounded retry on rate limiting (429) and transport errors.

Other statuses come back on the first occurrence. When the attempt budget
runs out the caller gets a synthetic ``200 {"data": [], "stats": {}}`` instead
of an exception, so dashboards keep rendering while the backend recovers.
The synthetic response is tagged with ``X-Clinic-Fallback`` for callers that
need to tell it apart; see ``is_fallback_response``.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import urlsplit

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
)

from ..metrics import record_fetch_attempt, record_fetch_fallback
from ..retry import (
    DEFAULT_INITIAL_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    RateLimitBackoff,
    RetryPolicy,
)

logger = structlog.get_logger(__name__)

FALLBACK_HEADER = "X-Clinic-Fallback"
FALLBACK_REASON = "retries-exhausted"

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RequestOptions:
    """Method, headers and body handed to the transport unchanged."""
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[bytes, str]] = None
    params: Optional[Dict[str, Any]] = None

    def as_request_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"headers": self.headers}
        if self.body is not None:
            kwargs["content"] = self.body
        if self.params:
            kwargs["params"] = self.params
        return kwargs


def build_fallback_response(method: str, url: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={"data": [], "stats": {}},
        headers={FALLBACK_HEADER: FALLBACK_REASON},
        request=httpx.Request(method, url),
    )


def is_fallback_response(response: httpx.Response) -> bool:
    """True when the response was synthesized after retries ran out."""
    return response.headers.get(FALLBACK_HEADER) == FALLBACK_REASON


def _is_rate_limited(response: httpx.Response) -> bool:
    return response.status_code == 429


def _validate_url(url: str) -> None:
    """Reject URLs no attempt could ever send; raised before the first request."""
    if not url:
        raise ValueError("url is required")
    try:
        parsed = httpx.URL(url)
        urlsplit(url)
    except (httpx.InvalidURL, ValueError) as e:
        raise ValueError(f"url is not a valid URL: {url!r}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(f"url must be an absolute http(s) URL: {url!r}")


async def fetch_with_retry(
    url: str,
    options: Optional[RequestOptions] = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
    *,
    client: Optional[httpx.AsyncClient] = None,
    sleep: Optional[Sleep] = None,
    policy: Optional[RetryPolicy] = None,
) -> httpx.Response:
    """
    Fetch with retry logic for handling rate limiting.

    Args:
        url: Absolute URL to request
        options: Method, headers and body for the request
        max_retries: Maximum number of attempts
        initial_delay_ms: Delay after the first failed attempt; grows x3 per retry
        client: Pooled client to send through; a short-lived one is opened if omitted
        sleep: Async sleep taking seconds (injected by tests)
        policy: Full retry policy; overrides max_retries/initial_delay_ms

    Returns:
        The first non-429 upstream response, or the synthetic fallback.

    Raises:
        ValueError: On an empty, malformed or relative URL, or an invalid policy. Transport and HTTP
            failures are never raised.
    """
    _validate_url(url)

    options = options or RequestOptions()
    policy = policy or RetryPolicy(max_retries=max_retries, initial_delay_ms=initial_delay_ms)
    sleep = sleep or asyncio.sleep

    if client is None:
        async with httpx.AsyncClient() as transient:
            return await _fetch(transient, url, options, policy, sleep)
    return await _fetch(client, url, options, policy, sleep)


async def _fetch(
    client: httpx.AsyncClient,
    url: str,
    options: RequestOptions,
    policy: RetryPolicy,
    sleep: Sleep,
) -> httpx.Response:
    method = options.method.upper()
    attempts = 0

    async def attempt() -> httpx.Response:
        nonlocal attempts
        if attempts > 0:
            # Stagger retries from independent callers
            jitter = policy.jitter_seconds()
            if jitter:
                await sleep(jitter)
        attempts += 1

        try:
            response = await client.request(method, url, **options.as_request_kwargs())
        except Exception:
            record_fetch_attempt(method, url, "transport_error")
            raise

        record_fetch_attempt(method, url, "rate_limited" if _is_rate_limited(response) else "success")
        return response

    def log_retry(retry_state: RetryCallState) -> None:
        delay_ms = int(retry_state.next_action.sleep * 1000)
        outcome = retry_state.outcome
        if outcome.failed:
            logger.error(
                "Backend fetch attempt failed",
                url=url,
                method=method,
                attempt=retry_state.attempt_number,
                max_retries=policy.max_retries,
                delay_ms=delay_ms,
                error=repr(outcome.exception()),
            )
        else:
            logger.info(
                "Rate limited by backend, waiting before retry",
                url=url,
                method=method,
                attempt=retry_state.attempt_number,
                max_retries=policy.max_retries,
                delay_ms=delay_ms,
            )

    def fallback(retry_state: RetryCallState) -> httpx.Response:
        outcome = retry_state.outcome
        last_error = repr(outcome.exception()) if outcome.failed else "HTTP 429"
        logger.warning(
            "Backend request failed after all attempts, returning empty response",
            url=url,
            method=method,
            attempts=retry_state.attempt_number,
            last_error=last_error,
        )
        record_fetch_fallback(method, url)
        return build_fallback_response(method, url)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_retries),
        wait=RateLimitBackoff(policy),
        retry=retry_if_exception_type(Exception) | retry_if_result(_is_rate_limited),
        sleep=sleep,
        before_sleep=log_retry,
        retry_error_callback=fallback,
    )
    return await retrying(attempt)
