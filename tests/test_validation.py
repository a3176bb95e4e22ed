"""
Tests for Form Schemas and Upload Validation
============================================
"""

import pytest
from pydantic import ValidationError


def rejection(schema, body):
    with pytest.raises(ValidationError) as exc:
        schema.model_validate(body)
    return schema.error_message(exc.value)


class TestIndianMobile:
    """Tests for phone validation."""

    @pytest.mark.parametrize("phone", ["+919876543210", "+916000000000"])
    def test_valid(self, phone):
        from clinic_gateway.validation import is_valid_indian_mobile

        assert is_valid_indian_mobile(phone)

    @pytest.mark.parametrize("phone", ["9876543210", "+915876543210", "+91987654321", "", None])
    def test_invalid(self, phone):
        from clinic_gateway.validation import is_valid_indian_mobile

        assert not is_valid_indian_mobile(phone)


class TestRegisterUserRequest:
    """Tests for the registration form."""

    BODY = {
        "name": "  Asha Rao ",
        "email": "Asha@Example.COM",
        "phone": "+919876543210",
        "age": "34",
        "gender": "female",
    }

    def test_normalizes_values(self):
        """Should trim strings, lowercase the email and coerce age."""
        from clinic_gateway.validation import RegisterUserRequest

        form = RegisterUserRequest.model_validate(self.BODY)

        assert form.name == "Asha Rao"
        assert form.email == "asha@example.com"
        assert form.age == 34
        assert form.to_backend_payload()["email"] == "asha@example.com"

    def test_missing_field(self):
        from clinic_gateway.validation import RegisterUserRequest

        body = {k: v for k, v in self.BODY.items() if k != "gender"}

        assert rejection(RegisterUserRequest, body) == "Name, email, phone, age, and gender are required"

    @pytest.mark.parametrize("age", [0, 121, -4])
    def test_age_out_of_range(self, age):
        """Should reject ages outside 1..120 with the age message."""
        from clinic_gateway.validation import RegisterUserRequest

        body = dict(self.BODY, age=age)

        assert rejection(RegisterUserRequest, body) == "Please provide a valid age between 1 and 120 years"


class TestRegisterAppointmentRequest:
    """Tests for the new-patient appointment form."""

    USER = {"firstName": "Asha", "lastName": "Rao", "email": "a@b.c", "phone": "+919876543210"}
    APPOINTMENT = {
        "appointmentDate": "2024-05-01",
        "appointmentTime": "10:30",
        "appointmentType": "consultation",
        "reason": "Checkup",
    }

    def test_valid_keeps_extra_fields(self):
        from clinic_gateway.validation import RegisterAppointmentRequest

        form = RegisterAppointmentRequest.model_validate({
            "user": dict(self.USER, address="Pune"),
            "appointment": self.APPOINTMENT,
        })
        payload = form.to_backend_payload()

        assert payload["user"]["firstName"] == "Asha"
        assert payload["user"]["address"] == "Pune"
        assert payload["appointment"]["appointmentType"] == "consultation"

    def test_missing_sections(self):
        from clinic_gateway.validation import RegisterAppointmentRequest

        assert rejection(RegisterAppointmentRequest, {"user": self.USER}) == "User and appointment data are required"

    def test_missing_user_field(self):
        from clinic_gateway.validation import RegisterAppointmentRequest

        user = {k: v for k, v in self.USER.items() if k != "lastName"}
        body = {"user": user, "appointment": self.APPOINTMENT}

        assert rejection(RegisterAppointmentRequest, body) == "Missing required user fields"

    def test_missing_appointment_field(self):
        from clinic_gateway.validation import RegisterAppointmentRequest

        appointment = dict(self.APPOINTMENT, reason="")
        body = {"user": self.USER, "appointment": appointment}

        assert rejection(RegisterAppointmentRequest, body) == "Missing required appointment fields"


class TestBookAppointmentRequest:
    def test_restructures_payload(self):
        """Should split the flat form into user and appointment sections."""
        from clinic_gateway.validation import BookAppointmentRequest

        form = BookAppointmentRequest.model_validate({
            "userId": "U123",
            "patientName": "Asha Rao",
            "patientPhone": "+919876543210",
            "appointmentDate": "2024-05-01",
            "appointmentTime": "10:30",
            "doctor": "Dr. Mehta",
            "userData": {"age": 34},
        })
        payload = form.to_backend_payload()

        assert payload["user"] == {
            "userId": "U123",
            "name": "Asha Rao",
            "phone": "+919876543210",
            "age": 34,
        }
        assert payload["appointment"]["doctor"] == "Dr. Mehta"
        assert payload["appointment"]["patientName"] == "Asha Rao"
        assert "symptoms" not in payload["appointment"]


class TestSmallForms:
    def test_forgot_user_id(self):
        from clinic_gateway.validation import ForgotUserIdRequest

        assert rejection(ForgotUserIdRequest, {"email": "a@b.c"}) == "Email and phone number are required"

    def test_verify_patient(self):
        from clinic_gateway.validation import VerifyPatientRequest

        assert rejection(VerifyPatientRequest, {"name": "   ", "phone": "1"}) == "Name and phone number are required"

    @pytest.mark.parametrize("passkey", ["12345", "1234567", "abcdef", ""])
    def test_passkey_format(self, passkey):
        """Should require exactly six digits."""
        from clinic_gateway.validation import PasskeyRequest

        assert rejection(PasskeyRequest, {"passkey": passkey}) == "Please enter a valid 6-digit passkey."

    def test_delete_all_users_alias(self):
        from clinic_gateway.validation import DeleteAllUsersRequest

        form = DeleteAllUsersRequest.model_validate({"adminPasskey": "123456"})

        assert form.admin_passkey == "123456"
        assert rejection(DeleteAllUsersRequest, {}) == "Admin passkey is required"


class TestValidateUpload:
    """Tests for upload checks."""

    def test_accepts_image(self):
        from clinic_gateway.validation import validate_upload

        validate_upload("scan.png", "image/png", 1024)

    def test_accepts_pdf(self):
        from clinic_gateway.validation import validate_upload

        validate_upload("report.pdf", "application/pdf", 5 * 1024 * 1024)

    def test_no_file(self):
        from clinic_gateway.validation import UploadRejected, validate_upload

        with pytest.raises(UploadRejected, match="No file provided"):
            validate_upload("", "image/png", 10)

    def test_too_large(self):
        from clinic_gateway.validation import UploadRejected, validate_upload

        with pytest.raises(UploadRejected, match="Maximum 5MB"):
            validate_upload("scan.png", "image/png", 5 * 1024 * 1024 + 1)

    def test_disallowed_type(self):
        from clinic_gateway.validation import UploadRejected, validate_upload

        with pytest.raises(UploadRejected, match="Only images and PDFs"):
            validate_upload("notes.txt", "text/plain", 10)
