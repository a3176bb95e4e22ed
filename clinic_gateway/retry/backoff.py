"""
Retry Backoff
=============
Backoff schedule for backend calls that hit rate limits or transport errors.

The delay before attempt ``n + 1`` is ``initial_delay_ms * 3 ** n`` unless the
upstream sent a ``Retry-After`` hint, which wins for that attempt only.
"""

import random
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from tenacity import RetryCallState
from tenacity.wait import wait_base

DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_DELAY_MS = 2000
DEFAULT_GROWTH_FACTOR = 3
DEFAULT_MAX_JITTER_MS = 500

# Delta-seconds, optionally fractional or with a seconds unit ("2", "2.5", "3 seconds")
RETRY_AFTER_SECONDS = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(?:s|secs?|seconds?)?$", re.IGNORECASE)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and delay schedule for a single retried call."""
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    growth_factor: int = DEFAULT_GROWTH_FACTOR
    max_jitter_ms: int = DEFAULT_MAX_JITTER_MS

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.initial_delay_ms < 0:
            raise ValueError(f"initial_delay_ms must be >= 0, got {self.initial_delay_ms}")
        if self.growth_factor < 1:
            raise ValueError(f"growth_factor must be >= 1, got {self.growth_factor}")
        if self.max_jitter_ms < 0:
            raise ValueError(f"max_jitter_ms must be >= 0, got {self.max_jitter_ms}")

    def delay_ms(self, retry_index: int) -> int:
        """Backoff after the attempt with 0-based index ``retry_index``."""
        return backoff_delay_ms(self.initial_delay_ms, retry_index, self.growth_factor)

    def jitter_seconds(self) -> float:
        """Random pre-retry pause in [0, max_jitter_ms) milliseconds."""
        if self.max_jitter_ms == 0:
            return 0.0
        return random.randrange(self.max_jitter_ms) / 1000.0


def backoff_delay_ms(initial_delay_ms: int, retry_index: int, growth_factor: int = DEFAULT_GROWTH_FACTOR) -> int:
    return initial_delay_ms * (growth_factor ** retry_index)


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """
    Convert a ``Retry-After`` header into milliseconds.

    Accepts delta-seconds ("2", "2.5", "3 seconds") and HTTP-dates. Returns None
    when the header is missing or unreadable so the caller keeps its own schedule.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    seconds = RETRY_AFTER_SECONDS.match(value)
    if seconds:
        return max(0, round(float(seconds.group(1)) * 1000))

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    return max(0, int((when - now).total_seconds() * 1000))


class RateLimitBackoff(wait_base):
    """
    tenacity wait strategy: ``Retry-After`` when the last attempt returned one,
    otherwise the policy's exponential schedule.
    """

    def __init__(self, policy: RetryPolicy):
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        delay_ms = self.policy.delay_ms(retry_state.attempt_number - 1)

        outcome = retry_state.outcome
        if outcome is not None and not outcome.failed:
            response = outcome.result()
            hinted = parse_retry_after(response.headers.get("Retry-After"))
            if hinted is not None:
                delay_ms = hinted

        return delay_ms / 1000.0
