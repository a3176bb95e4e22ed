"""
Upload Route
============
Patient document upload, validated here and streamed on to the backend.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from ..config import GatewayConfig
from ..errors import UserErrors
from ..http import BackendClient, BackendError, BackendTimeoutError
from ..validation import UploadRejected, validate_upload
from .deps import error_payload, get_backend, get_settings, read_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Uploads"])

UPLOAD_FAILED = "Failed to upload file. Please ensure the backend server is running and try again."


@router.post("/upload-image")
async def upload_image(
    file: UploadFile = File(None),
    backend: BackendClient = Depends(get_backend),
    config: GatewayConfig = Depends(get_settings),
):
    if file is None:
        return UserErrors.bad_request("No file provided")

    content = await file.read()
    try:
        validate_upload(
            file.filename,
            file.content_type,
            len(content),
            max_bytes=config.upload_max_bytes,
            allowed_types=config.allowed_upload_types,
        )
    except UploadRejected as e:
        return UserErrors.bad_request(str(e))

    logger.info(f"Uploading {file.filename} ({len(content)} bytes) to backend")
    try:
        response = await backend.request(
            "POST",
            "/api/upload",
            files={"file": (file.filename, content, file.content_type)},
            timeout=config.upload_timeout,
        )
    except BackendTimeoutError:
        return UserErrors.upstream("Upload timeout. Please try again.", 408)
    except BackendError as e:
        return UserErrors.internal(f"Upload failed: {e}", message=UPLOAD_FAILED, extra={"details": e.message})

    if not response.is_success:
        details = error_payload(response).get("message") or f"HTTP {response.status_code}"
        return UserErrors.internal(
            f"Upload rejected by backend: {response.status_code}",
            message=UPLOAD_FAILED,
            extra={"details": f"Backend upload failed: {details}"},
        )

    return JSONResponse(read_json(response))
