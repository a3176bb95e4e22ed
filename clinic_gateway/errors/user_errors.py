"""
User-Facing Error Standards
===========================
Error responses that show patients and admins a plain message while the
technical detail goes to the logs.

Never expose backend error internals to end users.
"""

import logging
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


INTERNAL_SERVER_ERROR = "Internal server error"


class FormRejected(Exception):
    """Raised by routes when a request body fails validation; answered with 400."""
    def __init__(self, message: str, key: str = "error", extra: Optional[Dict[str, Any]] = None):
        self.message = message
        self.key = key
        self.extra = extra
        super().__init__(message)


def create_user_error_response(
    message: str,
    status_code: int = 500,
    log_message: Optional[str] = None,
    key: str = "error",
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Create a JSON error response.

    Args:
        message: Message shown to the user
        status_code: HTTP status code
        log_message: Technical message for logs (never sent to the client)
        key: Body field carrying the message ("error" or "message")
        extra: Additional body fields, e.g. {"success": False}

    Returns:
        JSONResponse with the user-facing message
    """
    if log_message:
        logger.warning(f"[{status_code}] {log_message}")

    content: Dict[str, Any] = dict(extra or {})
    content[key] = message
    return JSONResponse(status_code=status_code, content=content)


class UserErrors:
    """Standard user error factory methods."""

    @staticmethod
    def internal(log_detail: str = None, message: str = INTERNAL_SERVER_ERROR, **kwargs) -> JSONResponse:
        """Unexpected failure in the gateway or the backend link."""
        return create_user_error_response(message, 500, log_detail, **kwargs)

    @staticmethod
    def bad_request(message: str, **kwargs) -> JSONResponse:
        """Missing or invalid input."""
        return create_user_error_response(message, 400, **kwargs)

    @staticmethod
    def unauthorized(message: str = "Authorization header is required", **kwargs) -> JSONResponse:
        """Missing credentials on an admin endpoint."""
        return create_user_error_response(message, 401, **kwargs)

    @staticmethod
    def not_found(message: str, **kwargs) -> JSONResponse:
        """Backend reported the resource as missing."""
        return create_user_error_response(message, 404, **kwargs)

    @staticmethod
    def access_denied(message: str = "Access denied", **kwargs) -> JSONResponse:
        """Backend refused access."""
        return create_user_error_response(message, 403, **kwargs)

    @staticmethod
    def upstream(message: str, status_code: int, **kwargs) -> JSONResponse:
        """Pass a backend failure status through with a friendly message."""
        return create_user_error_response(message, status_code, **kwargs)
