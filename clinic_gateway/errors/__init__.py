from .user_errors import (
    INTERNAL_SERVER_ERROR,
    FormRejected,
    UserErrors,
    create_user_error_response,
)

__all__ = [
    "INTERNAL_SERVER_ERROR",
    "FormRejected",
    "UserErrors",
    "create_user_error_response",
]
