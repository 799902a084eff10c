"""Custom exceptions for ride management."""

from common.exceptions import BadStateError, NotFoundError


class RideNotFoundError(NotFoundError):
    """Raised when a ride cannot be found."""
    pass


class RideStateError(BadStateError):
    """Raised when a ride is not in the status the operation requires."""

    def __init__(self, message, current_status=None):
        super().__init__(message)
        self.current_status = current_status
