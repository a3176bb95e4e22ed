"""
Gateway Logging
===============
One JSON line per record, whether it came from a stdlib logger (routes,
backend client, audit trail) or a structlog logger (retrying fetch, passkey
guard, health checks).

The request id is bound with structlog's contextvars, so both kinds of logger
see the id of the request being served and it is echoed back to the caller in
``x-request-id``.

Usage:
    from clinic_gateway.logging import setup_logging, RequestLoggingMiddleware

    setup_logging("clinic-gateway", level="INFO", json_output=True)
    app.add_middleware(RequestLoggingMiddleware)
"""

import json
import logging
import sys
import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from structlog.contextvars import bind_contextvars, get_contextvars, reset_contextvars

REQUEST_ID_HEADER = b"x-request-id"

# Paths polled by health checks and scrapers; completed requests there log at DEBUG
QUIET_PATHS = ("/api/health/live", "/metrics")


class JSONFormatter(logging.Formatter):
    """Render a log record, plus any ``extra_data`` dict it carries, as JSON."""

    def __init__(self, service_name: str = "clinic-gateway"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "request_id": get_contextvars().get("request_id"),
        }
        entry.update(getattr(record, "extra_data", None) or {})

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        entry["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(entry, default=str)


def _render_to_extra_data(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Last structlog processor: event becomes the message, the rest extra_data."""
    event = event_dict.pop("event", "")
    return {"msg": event, "extra": {"extra_data": event_dict}}


def setup_logging(service_name: str, level: str = "INFO", json_output: bool = True) -> logging.Logger:
    """
    Install a single stdout handler on the root logger and route structlog
    through it.

    Args:
        service_name: Reported in every JSON line
        level: Root log level name
        json_output: JSON lines when True, a readable single-line format otherwise

    Returns:
        The root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter(service_name))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-7s %(name)s: %(message)s %(extra_data)s",
            defaults={"extra_data": ""},
        ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    # httpx logs every request at INFO; the gateway records its own backend calls
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            _render_to_extra_data,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root.info(f"Logging configured for {service_name}", extra={"extra_data": {"level": level.upper()}})
    return root


def log_audit(
    action: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    outcome: str = "success",
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Record an admin action on the ``audit`` logger.

    Args:
        action: Dotted action name, e.g. "users.delete_all" or "admin.verify"
        resource_type: Kind of record touched (appointment, user)
        resource_id: Id of a single record, when there is one
        outcome: success, failure or locked
        metadata: Extra context such as the client key or backend status
    """
    level = logging.INFO if outcome == "success" else logging.WARNING
    logging.getLogger("audit").log(level, f"Admin action {action}: {outcome}", extra={
        "extra_data": {
            "audit": True,
            "action": action,
            "outcome": outcome,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "metadata": metadata or {},
        }
    })


def log_error(error: Exception, context: Optional[str] = None, **fields: Any) -> None:
    """Log an exception with its traceback on the ``errors`` logger."""
    logging.getLogger("errors").error(
        context or type(error).__name__,
        exc_info=(type(error), error, error.__traceback__),
        extra={"extra_data": {"error_type": type(error).__name__, **fields}},
    )


class RequestLoggingMiddleware:
    """
    Pure ASGI middleware logging each request once on arrival (DEBUG) and once
    on completion with status and duration.

    An incoming ``X-Request-ID`` is reused; otherwise a short id is generated.
    """

    def __init__(self, app):
        self.app = app
        self.logger = structlog.get_logger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        request_id = headers.get(REQUEST_ID_HEADER, b"").decode("latin-1")[:64] or uuid.uuid4().hex[:8]
        method = scope.get("method", "")
        path = scope.get("path", "")
        client_ip = _client_ip(scope, headers)

        tokens = bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                message["headers"] = list(message.get("headers", [])) + [
                    (REQUEST_ID_HEADER, request_id.encode("latin-1"))
                ]
            await send(message)

        self.logger.debug("request.started", method=method, path=path, client_ip=client_ip)
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 1)
            if path.startswith(QUIET_PATHS) and status_code < 400:
                log = self.logger.debug
            elif status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request.completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
                client_ip=client_ip,
            )
            reset_contextvars(**tokens)


def _client_ip(scope, headers: Dict[bytes, bytes]) -> str:
    forwarded = headers.get(b"x-forwarded-for", b"").decode("latin-1")
    if forwarded:
        return forwarded.split(",")[0].strip()
    client = scope.get("client")
    return client[0] if client else ""
