"""
Tests for Patient Routes
========================
"""

import json

import httpx


REGISTRATION = {
    "name": "Asha Rao",
    "email": "ASHA@example.com",
    "phone": "+919876543210",
    "age": 34,
    "gender": "female",
}


def failing(request):
    raise httpx.ConnectError("connection refused")


class TestRegisterUser:
    """Tests for POST /api/register-user."""

    def test_success(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(201, json={"data": {"userId": "U1"}}))

        response = client.post("/api/register-user", json=REGISTRATION)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Registration successful",
            "data": {"userId": "U1"},
        }
        sent = json.loads(backend.requests[0].content)
        assert backend.requests[0].url.path == "/api/auth/register"
        assert sent["email"] == "asha@example.com"

    def test_missing_fields(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={}))

        response = client.post("/api/register-user", json={"name": "Asha"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Name, email, phone, age, and gender are required",
        }
        assert backend.requests == []

    def test_invalid_age(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.post("/api/register-user", json=dict(REGISTRATION, age=150))

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a valid age between 1 and 120 years"

    def test_non_json_body(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.post(
            "/api/register-user", content=b"not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_backend_rejection_passed_through(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(409, json={"message": "Email already registered"}))

        response = client.post("/api/register-user", json=REGISTRATION)

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Email already registered"}

    def test_backend_unreachable(self, gateway):
        client, _ = gateway(failing)

        response = client.post("/api/register-user", json=REGISTRATION)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error during registration"}


class TestAppointmentBooking:
    """Tests for the two booking endpoints."""

    def test_register_appointment(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={"success": True, "appointmentId": "A9"}))

        response = client.post("/api/register-appointment", json={
            "user": {"firstName": "Asha", "lastName": "Rao", "email": "a@b.c", "phone": "+919876543210"},
            "appointment": {
                "appointmentDate": "2024-05-01",
                "appointmentTime": "10:30",
                "appointmentType": "consultation",
                "reason": "Checkup",
            },
        })

        assert response.status_code == 200
        assert response.json()["appointmentId"] == "A9"
        assert backend.requests[0].url.path == "/api/register-appointment"

    def test_register_appointment_missing_user_fields(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.post("/api/register-appointment", json={
            "user": {"firstName": "Asha"},
            "appointment": {},
        })

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required user fields"}

    def test_book_appointment_restructures(self, gateway):
        """Should send the backend a {user, appointment} body."""
        client, backend = gateway(lambda r: httpx.Response(200, json={"success": True}))

        client.post("/api/book-appointment", json={
            "userId": "U1",
            "patientName": "Asha Rao",
            "appointmentDate": "2024-05-01",
            "doctor": "Dr. Mehta",
        })

        sent = json.loads(backend.requests[0].content)
        assert backend.requests[0].url.path == "/api/appointments/register-appointment"
        assert sent["user"] == {"userId": "U1", "name": "Asha Rao"}
        assert sent["appointment"]["doctor"] == "Dr. Mehta"

    def test_book_appointment_not_retried(self, gateway):
        """Should surface a 429 without retrying the booking."""
        client, backend = gateway(lambda r: httpx.Response(429, json={}))

        response = client.post("/api/book-appointment", json={"userId": "U1"})

        assert response.status_code == 429
        assert response.json() == {"error": "Failed to book appointment"}
        assert len(backend.requests) == 1


class TestForgotUserId:
    def test_passes_backend_result_through(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(404, json={"success": False, "message": "No match"}))

        response = client.post("/api/forgot-user-id", json={"email": "a@b.c", "phone": "+919876543210"})

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "No match"}

    def test_missing_fields(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.post("/api/forgot-user-id", json={"email": "a@b.c"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email and phone number are required"}

    def test_backend_unreachable(self, gateway):
        client, _ = gateway(failing)

        response = client.post("/api/forgot-user-id", json={"email": "a@b.c", "phone": "+919876543210"})

        assert response.status_code == 500
        assert response.json()["message"] == "An error occurred while processing your request"


class TestVerifyExistingPatient:
    """Tests for POST /api/verify-existing-patient."""

    def test_verified(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={"data": {
            "userId": "U1",
            "name": "Asha Rao",
            "email": "a@b.c",
            "phone": "+919876543210",
            "age": 34,
            "gender": "female",
            "passwordHash": "never-forwarded",
        }}))

        response = client.post("/api/verify-existing-patient", json={"name": "Asha Rao", "phone": "+919876543210"})

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["user"]["userId"] == "U1"
        assert "passwordHash" not in body["user"]
        assert backend.requests[0].url.path == "/api/users/verify-by-name-phone"

    def test_not_found(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(404, json={}))

        response = client.post("/api/verify-existing-patient", json={"name": "X", "phone": "+919876543210"})

        assert response.status_code == 404
        assert response.json()["error"].startswith("Patient not found")

    def test_other_failure_uses_backend_message(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(422, json={"message": "Phone mismatch"}))

        response = client.post("/api/verify-existing-patient", json={"name": "X", "phone": "+919876543210"})

        assert response.status_code == 422
        assert response.json() == {"error": "Phone mismatch"}
