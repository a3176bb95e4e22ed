"""
Gateway Health Checks
=====================
Health, liveness and readiness endpoints. The only dependency that matters is
the clinic backend, so its ping decides both the reported status and readiness.
"""

import time
from enum import Enum
from typing import Dict, Optional

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..http import BackendClient

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"


class ComponentHealth(BaseModel):
    status: str  # connected, error or disconnected
    latency_ms: Optional[float] = None
    url: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    environment: str
    components: Dict[str, ComponentHealth]
    features: Dict[str, bool]
    timestamp: float


FEATURES = {
    "patientRegistration": True,
    "appointmentBooking": True,
    "adminDashboard": True,
    "fileUpload": True,
}


async def check_backend(backend: BackendClient, timeout: float = 5.0) -> ComponentHealth:
    """Ping the clinic backend's own health endpoint and time the round trip."""
    started = time.perf_counter()
    status = await backend.ping(timeout=timeout)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    if status != "connected":
        logger.warning("Backend health check failed", backend_status=status, backend_url=backend.base_url)
    return ComponentHealth(status=status, latency_ms=elapsed_ms, url=backend.base_url)


def create_health_router(
    service_name: str,
    version: str = "1.0.0",
    environment: str = "development",
    timeout: float = 5.0,
) -> APIRouter:
    """
    Build the health router. The backend client comes from ``app.state.backend``.

    Returns:
        Router serving /api/health, /api/health/live and /api/health/ready
    """
    router = APIRouter(prefix="/api/health", tags=["Health"])

    @router.get("", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        backend = await check_backend(request.app.state.backend, timeout)
        return HealthResponse(
            status=HealthStatus.HEALTHY if backend.status == "connected" else HealthStatus.DEGRADED,
            service=service_name,
            version=version,
            environment=environment,
            components={"backend": backend},
            features=FEATURES,
            timestamp=time.time(),
        )

    @router.get("/live")
    async def live():
        return {"status": "alive"}

    @router.get("/ready")
    async def ready(request: Request):
        """503 until the clinic backend answers its health check."""
        backend = await check_backend(request.app.state.backend, timeout)
        if backend.status != "connected":
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready", "reason": "backend_unavailable"},
            )
        return {"status": "ready"}

    return router
