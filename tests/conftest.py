"""
Shared fixtures: a recording sleep for retry schedules and a gateway app
wired to an httpx.MockTransport in place of the clinic backend.
"""

from typing import Callable, List

import httpx
import pytest


class RecordingSleep:
    """Async sleep stand-in that records requested delays (seconds) and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def delays_ms(self) -> List[int]:
        return [round(d * 1000) for d in self.delays]


class BackendStub:
    """Routes MockTransport requests to a handler and keeps every request seen."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def no_jitter(monkeypatch):
    """Disable the random pre-retry pause so recorded delays are exact."""
    from clinic_gateway.retry import RetryPolicy

    monkeypatch.setattr(RetryPolicy, "jitter_seconds", lambda self: 0.0)


@pytest.fixture
def gateway(recording_sleep, no_jitter):
    """
    Factory building a TestClient for the gateway app.

    Usage:
        client, backend = gateway(lambda request: httpx.Response(200, json={...}))
    """
    from fastapi.testclient import TestClient

    from clinic_gateway.app import create_app
    from clinic_gateway.config import GatewayConfig

    clients = []

    def build(handler, **config_overrides):
        backend = BackendStub(handler)
        config = GatewayConfig(
            backend_url="http://backend.test",
            admin_passkey="123456",
            environment="test",
            **config_overrides,
        )
        app = create_app(
            config,
            transport=backend.transport,
            sleep=recording_sleep,
            configure_logging=False,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client, backend

    yield build

    for client in clients:
        client.__exit__(None, None, None)
