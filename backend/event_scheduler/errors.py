"""Error taxonomy raised by the services and rendered by FastAPI.

Every error is an ``HTTPException`` so routes need no translation layer:
the detail body is always ``{"error": ..., "message": ...}`` with an
optional ``field`` naming the offending input.
"""
from typing import Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Request failed"

    def __init__(self, message: str, field: Optional[str] = None):
        detail = {"error": self.error, "message": message}
        if field:
            detail["field"] = field
        super().__init__(status_code=self.status_code, detail=detail)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """Malformed, missing or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation failed"


class NotFoundError(ServiceError):
    """A referenced identity does not resolve."""

    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class ConflictError(ServiceError):
    """A unique field is already taken."""

    status_code = status.HTTP_409_CONFLICT
    error = "Duplicate entry"


class InternalError(ServiceError):
    """A collaborator (usually the database) failed."""

    error = "Internal server error"
