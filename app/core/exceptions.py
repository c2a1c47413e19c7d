"""
Typed API errors.

Route handlers raise these instead of building error responses by hand; the
handler registered in `app.app.create_app` renders them as JSON:

    from app.core.exceptions import NotFoundError

    if not evidence:
        raise NotFoundError("Evidence not found")
"""

from typing import Any, Dict


SERVICE_UNAVAILABLE_MESSAGE = "Database not available. Please configure MongoDB URI in .env file."


class ApiError(Exception):
    """Base exception for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str = "Internal server error", status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationFailedError(ApiError):
    """Request payload is missing required data."""

    status_code = 400


class UnauthorizedError(ApiError):
    """Credentials missing or invalid."""

    status_code = 401


class NotFoundError(ApiError):
    """Requested document does not exist."""

    status_code = 404


class ConflictError(ApiError):
    """Unique constraint violated (MongoDB duplicate key)."""

    status_code = 409


class UploadRejectedError(ApiError):
    """Uploaded file failed the extension or size policy."""

    status_code = 400


class DatabaseUnavailableError(ApiError):
    """No database handle: the server is running in fallback mode."""

    status_code = 503

    def __init__(self, message: str = SERVICE_UNAVAILABLE_MESSAGE):
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "status": "service_unavailable"}
