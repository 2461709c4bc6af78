"""Domain errors raised by the service layer.

Every error carries the HTTP status it maps to; the API layer renders them
through a single exception handler (see ``kitflow.main``).
"""
from fastapi import status


class KitflowError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(KitflowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(KitflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class NotFound(KitflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InsufficientStock(KitflowError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Insufficient stock"


class ConflictError(KitflowError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ValidationError(KitflowError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input"


class EmailDeliveryError(KitflowError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to send email"
