"""
Clinic Gateway Application
==========================
FastAPI app factory wiring the backend client, passkey guard, routers,
logging middleware and the metrics endpoint.

Usage:
    uvicorn clinic_gateway.app:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .admin import AdminSessionStore, PasskeyGuard
from .config import GatewayConfig, get_config
from .errors import INTERNAL_SERVER_ERROR, FormRejected, create_user_error_response
from .http import BackendClient, BackendError
from .http.retry_fetch import Sleep
from .logging import RequestLoggingMiddleware, log_error, setup_logging
from .metrics import get_metrics_app
from .routes import (
    admin_router,
    appointments_router,
    create_health_router,
    patients_router,
    uploads_router,
)

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[GatewayConfig] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Optional[Sleep] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the gateway app.

    Args:
        config: Explicit settings; defaults to the environment config
        transport: httpx transport for the backend client (tests pass a MockTransport)
        sleep: Replacement for the retry sleep (tests record delays instead of waiting)
        configure_logging: Install the JSON log handler on the root logger
    """
    config = config or get_config()

    if configure_logging:
        setup_logging(config.service_name, config.log_level, config.json_logs)

    backend = BackendClient(
        config.backend_url,
        timeout=config.backend_timeout,
        transport=transport,
        sleep=sleep,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Gateway started; backend at {config.backend_url}")
        yield
        await backend.aclose()
        logger.info("Gateway stopped")

    app = FastAPI(
        title="Clinic Gateway",
        description="Patient and admin API gateway for the clinic backend",
        version=config.version,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.backend = backend
    app.state.passkey_guard = PasskeyGuard(
        config.admin_passkey,
        max_attempts=config.passkey_max_attempts,
        lockout_seconds=config.passkey_lockout_seconds,
        failure_window_seconds=config.passkey_failure_window_seconds,
    )
    app.state.sessions = AdminSessionStore(ttl_seconds=config.admin_cookie_max_age)

    @app.exception_handler(FormRejected)
    async def form_rejected_handler(request: Request, exc: FormRejected):
        return create_user_error_response(exc.message, 400, key=exc.key, extra=exc.extra)

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        log_error(exc, context=f"{request.method} {request.url.path}", service=exc.service)
        return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log_error(exc, context=f"Unhandled: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR})

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(create_health_router(
        config.service_name,
        version=config.version,
        environment=config.environment,
        timeout=config.health_timeout,
    ))
    app.include_router(admin_router)
    app.include_router(patients_router)
    app.include_router(appointments_router)
    app.include_router(uploads_router)
    app.mount("/metrics", get_metrics_app())

    return app
