"""
Ride management service - Core ride lifecycle operations.

This module handles:
    - Creating ride requests
    - Accepting rides
    - Completing rides
    - Listing pending rides and a passenger's own rides
"""

from .ride_lifecycle import (
    create_ride,
    accept_ride,
    complete_ride,
    list_pending_rides,
    list_rides_for_requester,
)

from .exceptions import (
    RideNotFoundError,
    RideStateError,
)

__all__ = [
    # Lifecycle operations
    "create_ride",
    "accept_ride",
    "complete_ride",
    "list_pending_rides",
    "list_rides_for_requester",
    # Exceptions
    "RideNotFoundError",
    "RideStateError",
]
