"""
Tests for Appointment Routes
============================
"""

import httpx

PHONE = "+919876543210"


class TestAppointmentsByNamePhone:
    """Tests for GET /api/appointments/by-name-phone."""

    def test_missing_params(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={}))

        response = client.get("/api/appointments/by-name-phone?name=Asha")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Name and phone number are required"}
        assert backend.requests == []

    def test_invalid_phone(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.get("/api/appointments/by-name-phone", params={"name": "Asha", "phone": "9876543210"})

        assert response.status_code == 400
        assert response.json()["error"] == "Please provide a valid Indian mobile number with +91"

    def test_found(self, gateway):
        """Should wrap the list and mark the response uncacheable."""
        client, backend = gateway(lambda r: httpx.Response(200, json={"data": [{"id": "A1"}]}))

        response = client.get("/api/appointments/by-name-phone", params={"name": "Asha", "phone": PHONE})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "appointments": [{"id": "A1"}],
            "message": "Appointments retrieved successfully",
        }
        assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
        assert backend.requests[0].url.params["phone"] == PHONE

    def test_not_found(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(404, json={}))

        response = client.get("/api/appointments/by-name-phone", params={"name": "Asha", "phone": PHONE})

        assert response.status_code == 404
        assert response.json()["error"] == "No appointments found for the provided name and phone number"


class TestAppointmentsForUser:
    """Tests for GET /api/appointments/user/{userId}."""

    def test_requires_phone(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.get("/api/appointments/user/U1")

        assert response.status_code == 400
        assert response.json() == {"error": "User ID and phone number are required"}

    def test_success_passes_body_through(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={"data": [{"id": "A1"}]}))

        response = client.get("/api/appointments/user/U1", params={"phone": PHONE})

        assert response.status_code == 200
        assert response.json() == {"data": [{"id": "A1"}]}
        assert response.headers["Pragma"] == "no-cache"
        assert backend.requests[0].url.path == "/api/appointments/user/U1"

    def test_user_not_found(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(404, json={}))

        response = client.get("/api/appointments/user/U1", params={"phone": PHONE})

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_other_failure_is_500(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(503, json={}))

        response = client.get("/api/appointments/user/U1", params={"phone": PHONE})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch appointments"}


class TestSingleAppointment:
    """Tests for GET /api/appointments/{appointmentId}."""

    def test_requires_user_id(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(200, json={}))

        response = client.get("/api/appointments/A1")

        assert response.status_code == 400
        assert response.json() == {"error": "User ID is required"}

    def test_success(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={"id": "A1", "status": "confirmed"}))

        response = client.get("/api/appointments/A1?userId=U1")

        assert response.status_code == 200
        assert response.json() == {"appointment": {"id": "A1", "status": "confirmed"}}
        assert backend.requests[0].url.path == "/api/appointments/public/A1"
        assert backend.requests[0].url.params["userId"] == "U1"

    def test_forbidden(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(403, json={}))

        response = client.get("/api/appointments/A1?userId=U2")

        assert response.status_code == 403
        assert response.json() == {"error": "Access denied"}

    def test_not_found(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(404, json={}))

        response = client.get("/api/appointments/A1?userId=U1")

        assert response.status_code == 404
        assert response.json() == {"error": "Appointment not found"}


class TestListAndAnalytics:
    def test_list_appointments(self, gateway):
        client, backend = gateway(lambda r: httpx.Response(200, json={"data": []}))

        response = client.get("/api/appointments?status=pending")

        assert response.status_code == 200
        assert backend.requests[0].url.params["status"] == "pending"

    def test_analytics_retried(self, gateway, recording_sleep):
        """Should retry the dashboard feed on 429."""
        responses = iter([httpx.Response(429), httpx.Response(200, json={"totals": {"appointments": 7}})])
        client, backend = gateway(lambda r: next(responses))

        response = client.get("/api/analytics/dashboard")

        assert response.status_code == 200
        assert response.json() == {"totals": {"appointments": 7}}
        assert len(backend.requests) == 2
        assert recording_sleep.delays_ms == [2000]

    def test_analytics_failure(self, gateway):
        client, _ = gateway(lambda r: httpx.Response(500, json={}))

        response = client.get("/api/analytics/dashboard")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch dashboard analytics"}
