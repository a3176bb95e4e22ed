from .schemas import (
    FormModel,
    RegisterUserRequest,
    RegisterAppointmentRequest,
    BookAppointmentRequest,
    ForgotUserIdRequest,
    VerifyPatientRequest,
    PasskeyRequest,
    DeleteAllUsersRequest,
    is_valid_indian_mobile,
)
from .uploads import UploadRejected, validate_upload

__all__ = [
    "FormModel",
    "RegisterUserRequest",
    "RegisterAppointmentRequest",
    "BookAppointmentRequest",
    "ForgotUserIdRequest",
    "VerifyPatientRequest",
    "PasskeyRequest",
    "DeleteAllUsersRequest",
    "is_valid_indian_mobile",
    "UploadRejected",
    "validate_upload",
]
