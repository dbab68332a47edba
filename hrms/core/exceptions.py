"""Exception classes raised by the service layer.

Each class carries the HTTP status the API layer renders it with, so
services never import FastAPI.
"""

from typing import Any


class HRMSError(Exception):
    """Base exception for the HRMS service layer."""

    status_code: int = 500

    def __init__(self, message: str = "An error occurred", **extra: Any):
        self.message = message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class NotFoundError(HRMSError):
    """Raised when a referenced user, role or permission does not exist."""

    status_code = 404


class ConflictError(HRMSError):
    """Raised on a uniqueness violation or a blocked delete."""

    status_code = 400


class BadRequestError(HRMSError):
    """Raised when input fails validation before the store is touched."""

    status_code = 400


class InternalError(HRMSError):
    """Raised when the backing store fails unexpectedly.

    The message is always generic; the underlying cause is chained
    (``raise ... from exc``) and logged, never returned to the caller.
    """

    status_code = 500

    def __init__(self, message: str = "Internal server error", **extra: Any):
        super().__init__(message, **extra)
