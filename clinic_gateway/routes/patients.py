"""
Patient Routes
==============
Registration, booking and identity lookups proxied to the clinic backend.
Single attempt each; a failed booking is shown to the patient rather than
retried behind their back.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..errors import UserErrors
from ..http import BackendClient, BackendError
from ..validation import (
    BookAppointmentRequest,
    ForgotUserIdRequest,
    RegisterAppointmentRequest,
    RegisterUserRequest,
    VerifyPatientRequest,
)
from .deps import error_payload, get_backend, parse_form, read_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Patients"])

JSON_HEADERS = {"Content-Type": "application/json"}


@router.post("/register-user")
async def register_user(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    form = await parse_form(request, RegisterUserRequest, key="message", extra={"success": False})

    try:
        response = await backend.request(
            "POST",
            "/api/auth/register",
            json=form.to_backend_payload(),
            headers=JSON_HEADERS,
        )
        result = error_payload(response)
    except BackendError as e:
        return UserErrors.internal(
            f"Registration failed: {e}",
            message="Internal server error during registration",
            key="message",
            extra={"success": False},
        )

    if response.is_success:
        return {"success": True, "message": "Registration successful", "data": result.get("data")}

    return UserErrors.upstream(
        result.get("message") or "Registration failed",
        response.status_code,
        key="message",
        extra={"success": False},
    )


@router.post("/register-appointment")
async def register_appointment(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    form = await parse_form(request, RegisterAppointmentRequest)

    response = await backend.request(
        "POST",
        "/api/register-appointment",
        json=form.to_backend_payload(),
        headers=JSON_HEADERS,
    )
    if not response.is_success:
        message = error_payload(response).get("message") or "Failed to register appointment"
        return UserErrors.upstream(message, response.status_code)

    return JSONResponse(read_json(response))


@router.post("/book-appointment")
async def book_appointment(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    form = await parse_form(request, BookAppointmentRequest)

    response = await backend.request(
        "POST",
        "/api/appointments/register-appointment",
        json=form.to_backend_payload(),
        headers=JSON_HEADERS,
    )
    if not response.is_success:
        message = error_payload(response).get("message") or "Failed to book appointment"
        return UserErrors.upstream(message, response.status_code)

    return JSONResponse(read_json(response))


@router.post("/forgot-user-id")
async def forgot_user_id(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    form = await parse_form(request, ForgotUserIdRequest, key="message", extra={"success": False})

    try:
        response = await backend.request(
            "POST",
            "/api/users/forgot-user-id",
            json=form.to_backend_payload(),
            headers=JSON_HEADERS,
        )
        result = read_json(response)
    except BackendError as e:
        return UserErrors.internal(
            f"Forgot user id: {e}",
            message="An error occurred while processing your request",
            key="message",
            extra={"success": False},
        )

    if not response.is_success:
        logger.warning(f"Forgot user id: backend returned {response.status_code}")
    return JSONResponse(result, status_code=response.status_code)


@router.post("/verify-existing-patient")
async def verify_existing_patient(
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    form = await parse_form(request, VerifyPatientRequest)

    response = await backend.request(
        "POST",
        "/api/users/verify-by-name-phone",
        json=form.to_backend_payload(),
        headers=JSON_HEADERS,
    )

    if response.status_code == 404:
        return UserErrors.not_found(
            "Patient not found. Please check your name and phone number or register as a new patient."
        )
    if not response.is_success:
        payload = error_payload(response)
        logger.error(f"Backend verification error: {payload}")
        return UserErrors.upstream(payload.get("message") or "Failed to verify patient", response.status_code)

    data = read_json(response).get("data") or {}
    return {
        "success": True,
        "user": {
            "userId": data.get("userId"),
            "name": data.get("name"),
            "email": data.get("email"),
            "phone": data.get("phone"),
            "age": data.get("age"),
            "gender": data.get("gender"),
        },
        "message": "Patient verified successfully",
    }
