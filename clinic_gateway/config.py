"""
Gateway Configuration
=====================
Settings for the clinic gateway, read from environment variables.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet

from .retry import RetryPolicy


def _env_backend_url() -> str:
    return (
        os.environ.get("CLINIC_BACKEND_URL")
        or os.environ.get("NEXT_PUBLIC_API_URL")
        or os.environ.get("BACKEND_URL")
        or "http://localhost:5000"
    )


def _env_set(name: str) -> FrozenSet[str]:
    return frozenset(item.strip() for item in os.environ.get(name, "").split(",") if item.strip())


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


ALLOWED_UPLOAD_TYPES: FrozenSet[str] = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/pdf",
})


@dataclass
class GatewayConfig:
    """Configuration for the gateway and its backend connection."""
    backend_url: str = field(default_factory=_env_backend_url)
    service_name: str = field(default_factory=lambda: os.environ.get("SERVICE_NAME", "clinic-gateway"))
    version: str = "1.0.0"
    environment: str = field(default_factory=lambda: os.environ.get("APP_ENV", "development"))

    # Logging
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO"))
    json_logs: bool = field(default_factory=lambda: _env_bool("LOG_JSON", True))

    # Backend timeouts (seconds)
    backend_timeout: float = field(default_factory=lambda: float(os.environ.get("BACKEND_TIMEOUT", "10")))
    health_timeout: float = 5.0
    upload_timeout: float = 30.0

    # Retry policies: dashboard feeds use the default, user management the faster one
    default_retry: RetryPolicy = field(default_factory=RetryPolicy)
    admin_retry: RetryPolicy = field(default_factory=lambda: RetryPolicy(max_retries=3, initial_delay_ms=1000))

    # Admin passkey
    admin_passkey: str = field(default_factory=lambda: os.environ.get("ADMIN_PASSKEY", "111111"))
    passkey_max_attempts: int = field(default_factory=lambda: int(os.environ.get("ADMIN_PASSKEY_MAX_ATTEMPTS", "5")))
    passkey_lockout_seconds: int = field(default_factory=lambda: int(os.environ.get("ADMIN_PASSKEY_LOCKOUT_SECONDS", "1800")))
    passkey_failure_window_seconds: int = field(default_factory=lambda: int(os.environ.get("ADMIN_PASSKEY_FAILURE_WINDOW_SECONDS", "1800")))
    admin_cookie_name: str = "admin_token"
    admin_cookie_max_age: int = 3600
    # Peers allowed to name the client in X-Forwarded-For; anyone else is keyed by peer IP
    trusted_proxies: FrozenSet[str] = field(default_factory=lambda: _env_set("TRUSTED_PROXIES"))

    # Uploads
    upload_max_bytes: int = 5 * 1024 * 1024
    allowed_upload_types: FrozenSet[str] = ALLOWED_UPLOAD_TYPES

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_config() -> GatewayConfig:
    """Process-wide config built from the environment on first use."""
    return GatewayConfig()
