"""
Admin Passkey Guard
===================
Passkey verification with failed-attempt lockout, plus the in-memory store
of admin session tokens handed out on success.

After ``max_attempts`` failures inside the failure window a client key is locked for
``lockout_seconds``; every attempt during the lock is refused without looking
at the passkey. A correct passkey clears the failure count.
"""

import hmac
import secrets
import time
from typing import Callable, Dict, Optional, Tuple

import structlog

from .models import PasskeyCheck, PasskeyResult

logger = structlog.get_logger(__name__)


class PasskeyGuard:
    """
    In-memory passkey lockout counter.

    Failures are counted per client inside a fixed window that starts at the
    first failure; a window with no lock expires and its count is dropped.
    Single process only; counters reset on restart.
    """

    def __init__(
        self,
        passkey: str,
        max_attempts: int = 5,
        lockout_seconds: int = 1800,
        failure_window_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            passkey: The admin passkey
            max_attempts: Failures allowed before the key is locked
            lockout_seconds: Lock duration
            failure_window_seconds: How long failures keep counting (defaults to lockout_seconds)
            clock: Time source (injected by tests)
        """
        self._passkey = passkey
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.failure_window_seconds = (
            lockout_seconds if failure_window_seconds is None else failure_window_seconds
        )
        self._clock = clock
        # key -> (failure count, window start)
        self._failures: Dict[str, Tuple[int, float]] = {}
        self._locked_until: Dict[str, float] = {}

    def lock_remaining(self, key: str) -> Optional[int]:
        """Seconds left on the lock for ``key``, or None when not locked."""
        locked_until = self._locked_until.get(key)
        if locked_until is None:
            return None
        remaining = locked_until - self._clock()
        if remaining <= 0:
            del self._locked_until[key]
            return None
        return max(1, int(remaining))

    def verify(self, key: str, candidate: str) -> PasskeyCheck:
        """
        Check a passkey attempt from ``key`` (client IP).

        Returns:
            PasskeyCheck with the decision and the attempts left
        """
        now = self._clock()
        self._prune(now)

        remaining = self.lock_remaining(key)
        if remaining is not None:
            logger.warning("Passkey attempt while locked", client=key, retry_after=remaining)
            return PasskeyCheck(PasskeyResult.LOCKED, attempts_remaining=0, retry_after=remaining)

        if hmac.compare_digest(candidate.encode(), self._passkey.encode()):
            self._failures.pop(key, None)
            return PasskeyCheck(PasskeyResult.ACCEPTED, attempts_remaining=self.max_attempts)

        count, window_start = self._failures.get(key, (0, now))
        failures = count + 1
        if failures >= self.max_attempts:
            self._failures.pop(key, None)
            self._locked_until[key] = now + self.lockout_seconds
            logger.warning("Passkey locked after repeated failures", client=key, failures=failures)
            return PasskeyCheck(PasskeyResult.LOCKED, attempts_remaining=0, retry_after=self.lockout_seconds)

        self._failures[key] = (failures, window_start)
        return PasskeyCheck(PasskeyResult.REJECTED, attempts_remaining=self.max_attempts - failures)

    def _prune(self, now: float) -> None:
        """Drop failure windows that have run out and locks that have expired."""
        stale = [
            key for key, (_, started) in self._failures.items()
            if now - started >= self.failure_window_seconds
        ]
        for key in stale:
            del self._failures[key]
        expired = [key for key, until in self._locked_until.items() if until <= now]
        for key in expired:
            del self._locked_until[key]


class AdminSessionStore:
    """
    Admin session tokens issued after a successful passkey check.

    In-memory with TTL; sessions do not survive a restart.
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, float] = {}

    def issue(self) -> str:
        self._cleanup()
        token = secrets.token_urlsafe(32)
        self._sessions[token] = self._clock() + self.ttl_seconds
        return token

    def is_valid(self, token: Optional[str]) -> bool:
        if not token:
            return False
        self._cleanup()
        return token in self._sessions

    def revoke(self, token: str) -> None:
        self._sessions.pop(token, None)

    def _cleanup(self) -> None:
        """Remove expired sessions."""
        now = self._clock()
        expired = [token for token, expires in self._sessions.items() if expires <= now]
        for token in expired:
            del self._sessions[token]
