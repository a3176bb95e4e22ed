from typing import Optional, Any


class BackendError(Exception):
    """Base exception for all clinic backend communication errors."""
    def __init__(self, message: str, service: str = "clinic-backend", status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.service = service
        self.status_code = status_code
        self.details = details
        super().__init__(f"[{service}] {message} (Status: {status_code})")


class BackendUnavailableError(BackendError):
    """Raised when the backend is unreachable."""
    pass


class BackendTimeoutError(BackendUnavailableError):
    """Raised specifically on timeouts."""
    pass
