"""
Upload Validation
=================
Checks applied to patient documents before they are forwarded to the backend.
"""

from typing import AbstractSet, Optional

from ..config import ALLOWED_UPLOAD_TYPES

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class UploadRejected(ValueError):
    """Raised when an uploaded file fails validation; message is user-facing."""
    pass


def validate_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_types: AbstractSet[str] = ALLOWED_UPLOAD_TYPES,
) -> None:
    """
    Validate an uploaded file.

    Args:
        filename: Client-supplied file name
        content_type: Declared MIME type
        size: Size in bytes
        max_bytes: Largest accepted file
        allowed_types: Accepted MIME types

    Raises:
        UploadRejected: With the message to show the user
    """
    if not filename:
        raise UploadRejected("No file provided")

    if size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise UploadRejected(f"File size too large. Maximum {limit_mb}MB allowed.")

    if (content_type or "").lower() not in allowed_types:
        raise UploadRejected("Invalid file type. Only images and PDFs are allowed.")
