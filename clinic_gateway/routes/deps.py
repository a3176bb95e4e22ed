"""
Route Dependencies
==================
Shared helpers for the proxy routers: app-state accessors, body parsing and
reading backend responses.
"""

from typing import AbstractSet, Any, Dict, Optional, Type, TypeVar

import httpx
from fastapi import Request
from pydantic import ValidationError

from ..admin import AdminSessionStore, PasskeyGuard
from ..config import GatewayConfig
from ..errors import FormRejected
from ..http import BackendClient, BackendError
from ..validation import FormModel

F = TypeVar("F", bound=FormModel)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def get_settings(request: Request) -> GatewayConfig:
    return request.app.state.config


def get_passkey_guard(request: Request) -> PasskeyGuard:
    return request.app.state.passkey_guard


def get_sessions(request: Request) -> AdminSessionStore:
    return request.app.state.sessions


def client_key(request: Request, trusted_proxies: AbstractSet[str] = frozenset()) -> str:
    """
    Client identity for lockout counting.

    The first X-Forwarded-For hop is used only when the direct peer is a
    trusted proxy; otherwise the peer IP is the key.
    """
    peer = request.client.host if request.client else "unknown"
    if peer in trusted_proxies:
        forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return peer


def forward_headers(request: Request) -> Dict[str, str]:
    """JSON content type plus the caller's Authorization header, if any."""
    headers = {"Content-Type": "application/json"}
    auth = request.headers.get("Authorization")
    if auth:
        headers["Authorization"] = auth
    return headers


async def parse_form(
    request: Request,
    schema: Type[F],
    key: str = "error",
    extra: Optional[Dict[str, Any]] = None,
) -> F:
    """
    Validate the JSON body against ``schema``.

    Raises:
        FormRejected: With the schema's user-facing message
    """
    try:
        body = await request.json()
    except ValueError:
        raise FormRejected(schema.required_message, key=key, extra=extra)

    try:
        return schema.model_validate(body)
    except ValidationError as e:
        raise FormRejected(schema.error_message(e), key=key, extra=extra)


def read_json(response: httpx.Response) -> Any:
    """
    Decode a backend JSON body.

    Raises:
        BackendError: If the body is not JSON
    """
    try:
        return response.json()
    except ValueError as e:
        raise BackendError(
            "Backend returned a non-JSON body",
            status_code=response.status_code,
            details=response.text[:200],
        ) from e


def error_payload(response: httpx.Response) -> Dict[str, Any]:
    """Backend error body as a dict; plain-text bodies become {"message": text}."""
    try:
        data = response.json()
    except ValueError:
        return {"message": response.text}
    return data if isinstance(data, dict) else {"message": str(data)}
