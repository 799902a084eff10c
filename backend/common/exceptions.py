"""Error taxonomy shared by the service layer and the API exception handler."""

from rest_framework import status


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""
    error = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when input is missing or malformed."""
    error = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class BadStateError(ServiceError):
    """Raised when an entity is not in a state that allows the operation."""
    error = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class ConflictError(ServiceError):
    """Raised when the operation collides with existing data."""
    error = "CONFLICT"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class NotFoundError(ServiceError):
    error = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AuthError(ServiceError):
    error = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class ForbiddenError(ServiceError):
    error = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class InternalError(ServiceError):
    """Wraps an unexpected failure so it leaves the API as a 500."""
