"""
Admin Routes
============
Dashboard feeds and bulk actions proxied to the backend, plus passkey access.

Dashboard reads and destructive bulk calls go through the retrying fetch so a
rate-limited backend slows the dashboard down instead of breaking it.
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..admin import AdminSessionStore, PasskeyGuard
from ..config import GatewayConfig
from ..errors import UserErrors
from ..http import BackendClient, BackendError, is_fallback_response
from ..logging import log_audit
from ..validation import DeleteAllUsersRequest, PasskeyRequest
from .deps import (
    client_key,
    error_payload,
    forward_headers,
    get_backend,
    get_passkey_guard,
    get_sessions,
    get_settings,
    parse_form,
    read_json,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# =============================================================================
# Appointments
# =============================================================================

@router.get("/appointments")
async def list_appointments(
    request: Request,
    page: str = "1",
    limit: str = "10",
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    response = await backend.request_with_retry(
        "GET",
        "/api/appointments/admin",
        policy=config.default_retry,
        headers=forward_headers(request),
        params={"page": page, "limit": limit},
    )
    if not response.is_success:
        return UserErrors.upstream("Failed to fetch appointments", response.status_code)
    return JSONResponse(read_json(response))


@router.patch("/appointments")
async def update_appointment(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    body = await request.body()
    response = await backend.request(
        "PATCH",
        "/api/appointments/admin",
        content=body,
        headers=forward_headers(request),
    )
    return JSONResponse(read_json(response), status_code=response.status_code)


@router.delete("/appointments")
@router.delete("/appointments/delete-all")
async def delete_all_appointments(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    body = await request.body()
    response = await backend.request_with_retry(
        "DELETE",
        "/api/appointments/delete-all",
        policy=config.default_retry,
        headers=forward_headers(request),
        content=body or None,
    )
    if is_fallback_response(response):
        log_audit("appointments.delete_all", resource_type="appointment", outcome="failure",
                  metadata={"reason": "retries-exhausted"})
        return UserErrors.upstream("Failed to delete all appointments", 503)
    if not response.is_success:
        log_audit("appointments.delete_all", resource_type="appointment", outcome="failure",
                  metadata={"status": response.status_code})
        return UserErrors.upstream("Failed to delete all appointments", response.status_code)

    log_audit("appointments.delete_all", resource_type="appointment")
    return {"message": "All appointments deleted successfully"}


# =============================================================================
# Users
# =============================================================================

@router.get("/users")
async def list_users(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    if not request.headers.get("Authorization"):
        return UserErrors.unauthorized()

    # Degrade to an empty list on any failure so the users table still renders
    try:
        response = await backend.request_with_retry(
            "GET",
            "/api/users",
            policy=config.admin_retry,
            headers=forward_headers(request),
        )
        if not response.is_success:
            logger.error(f"Admin users: backend error {response.status_code} {response.reason_phrase}")
            return {"data": [], "message": "Failed to fetch users", "status": response.status_code}
        return JSONResponse(read_json(response))
    except BackendError as e:
        logger.error(f"Admin users: fetch error: {e}")
        return {"data": [], "error": "Internal server error"}


@router.delete("/users")
async def delete_user(
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    if not user_id:
        return UserErrors.bad_request("User ID is required")
    if not request.headers.get("Authorization"):
        return UserErrors.unauthorized()

    try:
        response = await backend.request_with_retry(
            "DELETE",
            f"/api/users/{quote(user_id, safe='')}",
            policy=config.admin_retry,
            headers=forward_headers(request),
        )
        if is_fallback_response(response):
            log_audit("users.delete", resource_type="user", resource_id=user_id, outcome="failure",
                      metadata={"reason": "retries-exhausted"})
            return UserErrors.upstream("Failed to delete user", 503)
        if response.status_code == 404:
            return UserErrors.not_found("User not found")
        if response.status_code == 403:
            return UserErrors.access_denied()
        if not response.is_success:
            return UserErrors.upstream("Failed to delete user", response.status_code)

        log_audit("users.delete", resource_type="user", resource_id=user_id)
        return JSONResponse(read_json(response))
    except BackendError as e:
        return UserErrors.internal(f"Delete user {user_id}: {e}", message="Failed to delete user")


@router.delete("/users/delete-all")
async def delete_all_users(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    if not request.headers.get("Authorization"):
        return UserErrors.unauthorized()

    form = await parse_form(request, DeleteAllUsersRequest, key="message")

    try:
        response = await backend.request_with_retry(
            "DELETE",
            "/api/users/delete-all",
            policy=config.admin_retry,
            headers=forward_headers(request),
            content=form.model_dump_json(by_alias=True),
        )
        if is_fallback_response(response):
            log_audit("users.delete_all", resource_type="user", outcome="failure",
                      metadata={"reason": "retries-exhausted"})
            return UserErrors.upstream("Failed to delete users", 503, key="message")
        if not response.is_success:
            log_audit("users.delete_all", resource_type="user", outcome="failure",
                      metadata={"status": response.status_code})
            message = error_payload(response).get("message") or "Failed to delete users"
            return UserErrors.upstream(message, response.status_code, key="message")

        log_audit("users.delete_all", resource_type="user")
        return JSONResponse(read_json(response))
    except BackendError as e:
        return UserErrors.internal(
            f"Delete all users: {e}",
            message="An error occurred while deleting users",
            key="message",
        )


# =============================================================================
# Passkey access
# =============================================================================

@router.post("/verify")
async def verify_passkey(
    request: Request,
    guard: PasskeyGuard = Depends(get_passkey_guard),
    sessions: AdminSessionStore = Depends(get_sessions),
    config: GatewayConfig = Depends(get_settings),
):
    form = await parse_form(request, PasskeyRequest, key="message", extra={"success": False})
    client = client_key(request, config.trusted_proxies)
    check = guard.verify(client, form.passkey)

    if check.locked:
        log_audit("admin.verify", outcome="locked", metadata={"client": client})
        minutes = max(1, (check.retry_after + 59) // 60)
        return JSONResponse(
            status_code=429,
            content={
                "success": False,
                "message": f"Too many failed attempts. Try again in {minutes} minutes",
            },
            headers={"Retry-After": str(check.retry_after)},
        )

    if not check.accepted:
        log_audit("admin.verify", outcome="failure", metadata={"client": client})
        return JSONResponse(
            status_code=401,
            content={
                "success": False,
                "message": "Invalid passkey",
                "attemptsRemaining": check.attempts_remaining,
            },
        )

    log_audit("admin.verify", metadata={"client": client})
    response = JSONResponse({"success": True, "message": "Admin verification successful"})
    response.set_cookie(
        config.admin_cookie_name,
        sessions.issue(),
        max_age=config.admin_cookie_max_age,
        path="/",
        httponly=True,
        secure=config.is_production,
        samesite="strict",
    )
    return response


@router.post("/validate")
async def validate_admin(
    request: Request,
    sessions: AdminSessionStore = Depends(get_sessions),
    config: GatewayConfig = Depends(get_settings),
):
    if sessions.is_valid(request.cookies.get(config.admin_cookie_name)):
        return {"isAdmin": True, "message": "Admin validated successfully"}
    return JSONResponse(
        status_code=401,
        content={"isAdmin": False, "message": "Admin validation failed"},
    )


@router.post("/logout")
async def logout_admin(
    request: Request,
    sessions: AdminSessionStore = Depends(get_sessions),
    config: GatewayConfig = Depends(get_settings),
):
    token = request.cookies.get(config.admin_cookie_name)
    if token:
        sessions.revoke(token)
    log_audit("admin.logout", metadata={"had_session": bool(token)})
    response = JSONResponse({"success": True, "message": "Admin logged out"})
    response.delete_cookie(
        config.admin_cookie_name,
        path="/",
        httponly=True,
        secure=config.is_production,
        samesite="strict",
    )
    return response
