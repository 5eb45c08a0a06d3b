"""Domain exceptions, rendered as JSON errors by the handlers in app.main."""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map to a client-facing response."""

    status_code: int = 500
    error: str = "Server error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    error = "Validation error"
    default_message = "Invalid request"


class AuthenticationRequired(AppError):
    status_code = 401
    error = "Authentication required"
    default_message = "Invalid or expired token"


class AuthorizationError(AppError):
    status_code = 403
    error = "Access denied"
    default_message = "You are not allowed to perform this action"


class NotFoundError(AppError):
    """Raised for missing records and for records owned by another college."""

    status_code = 404
    error = "Not found"
    default_message = "Resource not found"


class DuplicateError(AppError):
    status_code = 409
    error = "Duplicate"
    default_message = "Resource already exists"


class ConflictError(AppError):
    """The request clashes with the current state of a record (not a unique key)."""

    status_code = 409
    error = "Conflict"
    default_message = "Request conflicts with the current state of the resource"
