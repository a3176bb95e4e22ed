"""
Appointment Routes
==================
Public appointment lookups and the dashboard analytics feed.
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..config import GatewayConfig
from ..errors import UserErrors
from ..http import BackendClient, BackendError
from ..validation import is_valid_indian_mobile
from .deps import NO_CACHE_HEADERS, forward_headers, get_backend, get_settings, read_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Appointments"])


@router.get("/appointments")
async def list_appointments(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    params = dict(request.query_params)
    response = await backend.request(
        "GET",
        "/api/appointments",
        params=params or None,
        headers=forward_headers(request),
    )
    if not response.is_success:
        return UserErrors.upstream("Failed to fetch appointments", response.status_code)
    return JSONResponse(read_json(response))


@router.get("/appointments/by-name-phone")
async def appointments_by_name_phone(
    name: Optional[str] = None,
    phone: Optional[str] = None,
    backend: BackendClient = Depends(get_backend),
):
    failure = {"success": False}
    if not name or not phone:
        return UserErrors.bad_request("Name and phone number are required", extra=failure)
    if not is_valid_indian_mobile(phone):
        return UserErrors.bad_request(
            "Please provide a valid Indian mobile number with +91", extra=failure
        )

    try:
        response = await backend.request(
            "GET",
            "/api/appointments/by-name-phone",
            params={"name": name, "phone": phone},
            headers={"Content-Type": "application/json", **NO_CACHE_HEADERS},
        )
        if response.status_code == 404:
            return UserErrors.not_found(
                "No appointments found for the provided name and phone number", extra=failure
            )
        if not response.is_success:
            return UserErrors.upstream("Failed to fetch appointments", response.status_code, extra=failure)
        data = read_json(response)
    except BackendError as e:
        return UserErrors.internal(f"Appointments by name/phone: {e}", extra=failure)

    appointments = data.get("data") if isinstance(data, dict) else data
    return JSONResponse(
        {
            "success": True,
            "appointments": appointments or [],
            "message": "Appointments retrieved successfully",
        },
        headers=NO_CACHE_HEADERS,
    )


@router.get("/appointments/user/{user_id}")
async def appointments_for_user(
    user_id: str,
    phone: Optional[str] = None,
    backend: BackendClient = Depends(get_backend),
):
    if not user_id or not phone:
        return UserErrors.bad_request("User ID and phone number are required")

    try:
        response = await backend.request(
            "GET",
            f"/api/appointments/user/{quote(user_id, safe='')}",
            params={"phone": phone},
            headers={"Content-Type": "application/json", **NO_CACHE_HEADERS},
        )
        if response.status_code == 404:
            return UserErrors.not_found("User not found")
        if not response.is_success:
            return UserErrors.internal(
                f"Appointments for user {user_id}: backend returned {response.status_code}",
                message="Failed to fetch appointments",
            )
        data = read_json(response)
    except BackendError as e:
        return UserErrors.internal(f"Appointments for user {user_id}: {e}", message="Failed to fetch appointments")

    return JSONResponse(data, headers=NO_CACHE_HEADERS)


@router.get("/appointments/{appointment_id}")
async def get_appointment(
    appointment_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    backend: BackendClient = Depends(get_backend),
):
    if not user_id:
        return UserErrors.bad_request("User ID is required")

    try:
        response = await backend.request(
            "GET",
            f"/api/appointments/public/{quote(appointment_id, safe='')}",
            params={"userId": user_id},
            headers={"Content-Type": "application/json"},
        )
        if response.status_code == 404:
            return UserErrors.not_found("Appointment not found")
        if response.status_code == 403:
            return UserErrors.access_denied()
        if not response.is_success:
            return UserErrors.internal(
                f"Appointment {appointment_id}: backend returned {response.status_code}",
                message="Failed to fetch appointment",
            )
        data = read_json(response)
    except BackendError as e:
        return UserErrors.internal(f"Appointment {appointment_id}: {e}", message="Failed to fetch appointment")

    return {"appointment": data}


@router.get("/analytics/dashboard")
async def dashboard_analytics(
    request: Request,
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    response = await backend.request_with_retry(
        "GET",
        "/api/analytics/dashboard",
        policy=config.default_retry,
        headers=forward_headers(request),
        params=dict(request.query_params) or None,
    )
    if not response.is_success:
        return UserErrors.upstream("Failed to fetch dashboard analytics", response.status_code)
    return JSONResponse(read_json(response))
