"""
Form Schemas
============
Request bodies accepted by the patient and admin endpoints.

Each schema knows which message to show for its validation failures, so
routes answer 400 with the same wording the web pages already display.
"""

import re
from typing import Annotated, Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

Required = Annotated[str, Field(min_length=1)]

INDIAN_MOBILE_PATTERN = re.compile(r'^\+91[6-9]\d{9}$')

# Errors that mean "field absent" rather than "field malformed"
_MISSING_ERROR_TYPES = {"missing", "string_too_short", "string_type"}


def is_valid_indian_mobile(phone: str) -> bool:
    """Validate an Indian mobile number in +91XXXXXXXXXX form."""
    return bool(INDIAN_MOBILE_PATTERN.match(phone or ""))


class FormModel(BaseModel):
    """Base for request forms: camelCase on the wire, stripped strings."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    required_message: ClassVar[str] = "Missing required fields"
    # Field alias -> message for malformed (not missing) values
    field_messages: ClassVar[Dict[str, str]] = {}

    @classmethod
    def error_message(cls, exc: ValidationError) -> str:
        errors = exc.errors()
        if any(error.get("type") in _MISSING_ERROR_TYPES for error in errors):
            return cls.required_message
        for error in errors:
            loc = error.get("loc") or ()
            if not loc:
                continue
            message = cls.field_messages.get(str(loc[0]))
            if message:
                return message
        return cls.required_message

    def to_backend_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RegisterUserRequest(FormModel):
    required_message: ClassVar[str] = "Name, email, phone, age, and gender are required"
    field_messages: ClassVar[Dict[str, str]] = {
        "age": "Please provide a valid age between 1 and 120 years",
    }

    name: Required
    email: Required
    phone: Required
    age: int = Field(ge=1, le=120)
    gender: Required
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class PatientIdentity(FormModel):
    model_config = ConfigDict(extra="allow")

    first_name: Required
    last_name: Required
    email: Required
    phone: Required


class AppointmentDetails(FormModel):
    model_config = ConfigDict(extra="allow")

    appointment_date: Required
    appointment_time: Required
    appointment_type: Required
    reason: Required


class RegisterAppointmentRequest(FormModel):
    required_message: ClassVar[str] = "User and appointment data are required"

    user: PatientIdentity
    appointment: AppointmentDetails

    @classmethod
    def error_message(cls, exc: ValidationError) -> str:
        for error in exc.errors():
            loc = error.get("loc") or ()
            if len(loc) < 2:
                continue
            if loc[0] == "user":
                return "Missing required user fields"
            if loc[0] == "appointment":
                return "Missing required appointment fields"
        return cls.required_message


class BookAppointmentRequest(FormModel):
    """Flat booking form from the existing-patient page."""
    model_config = ConfigDict(extra="ignore")

    user_id: Optional[str] = None
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None
    patient_phone: Optional[str] = None
    user_data: Dict[str, Any] = Field(default_factory=dict)
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    doctor: Optional[str] = None
    appointment_type: Optional[str] = None
    symptoms: Optional[Any] = None
    additional_notes: Optional[str] = None
    attachments: Optional[List[Any]] = None

    def to_backend_payload(self) -> Dict[str, Any]:
        """Restructure into the backend's {user, appointment} shape."""
        user = {
            "userId": self.user_id,
            "name": self.patient_name,
            "email": self.patient_email,
            "phone": self.patient_phone,
            **self.user_data,
        }
        appointment = {
            "appointmentDate": self.appointment_date,
            "appointmentTime": self.appointment_time,
            "doctor": self.doctor,
            "appointmentType": self.appointment_type,
            "symptoms": self.symptoms,
            "additionalNotes": self.additional_notes,
            "attachments": self.attachments,
            "patientName": self.patient_name,
            "patientEmail": self.patient_email,
            "patientPhone": self.patient_phone,
        }
        return {
            "user": {k: v for k, v in user.items() if v is not None},
            "appointment": {k: v for k, v in appointment.items() if v is not None},
        }


class ForgotUserIdRequest(FormModel):
    required_message: ClassVar[str] = "Email and phone number are required"

    email: Required
    phone: Required


class VerifyPatientRequest(FormModel):
    required_message: ClassVar[str] = "Name and phone number are required"

    name: Required
    phone: Required


class PasskeyRequest(FormModel):
    required_message: ClassVar[str] = "Please enter a valid 6-digit passkey."

    passkey: str = Field(pattern=r'^\d{6}$')


class DeleteAllUsersRequest(FormModel):
    required_message: ClassVar[str] = "Admin passkey is required"

    admin_passkey: Required
