"""
Core ride lifecycle operations.

A ride moves strictly forward:

    REQUESTED --accept--> ACCEPTED --complete--> COMPLETED

These functions only check ride state, never who is calling; route guards
decide that. Every function takes an optional `store` so callers and tests
can swap the persistence backend.
"""

import logging
from typing import List, Optional

from django.utils import timezone

from common.exceptions import ValidationError
from rides.models import Ride
from rides.stores import RideStore, get_ride_store
from .exceptions import RideNotFoundError, RideStateError

logger = logging.getLogger(__name__)


# ===================== Passenger Operations =====================

def create_ride(
    pickup_location: str,
    drop_location: str,
    requester_id,
    store: Optional[RideStore] = None,
) -> Ride:
    """
    Create a new ride request in REQUESTED state.

    Args:
        pickup_location: Free-text pickup location
        drop_location: Free-text drop location
        requester_id: ID of the passenger creating the ride

    Raises:
        ValidationError: If pickup or drop location is missing
    """
    store = store or get_ride_store()

    pickup_location = (pickup_location or "").strip()
    drop_location = (drop_location or "").strip()

    missing = []
    if not pickup_location:
        missing.append("pickupLocation: This field is required.")
    if not drop_location:
        missing.append("dropLocation: This field is required.")
    if missing:
        raise ValidationError("; ".join(missing))

    ride = store.add(Ride(
        pickup_location=pickup_location,
        drop_location=drop_location,
        passenger_id=requester_id,
        status=Ride.REQUESTED,
        created_at=timezone.now(),
    ))

    logger.info("Ride %s requested by user %s", ride.id, requester_id)
    return ride


def list_rides_for_requester(user_id, store: Optional[RideStore] = None) -> List[Ride]:
    """All rides created by `user_id`, whatever their status."""
    store = store or get_ride_store()
    return store.list_by_requester(user_id)


# ===================== Driver Operations =====================

def list_pending_rides(store: Optional[RideStore] = None) -> List[Ride]:
    """Rides still waiting for a driver."""
    store = store or get_ride_store()
    return store.list_by_status(Ride.REQUESTED)


def accept_ride(ride_id, driver_id, store: Optional[RideStore] = None) -> Ride:
    """
    Assign a driver to a REQUESTED ride.

    Raises:
        RideNotFoundError: If the ride does not exist
        RideStateError: If the ride is no longer REQUESTED
    """
    store = store or get_ride_store()

    ride = _transition(
        store,
        ride_id,
        from_status=Ride.REQUESTED,
        action="accepted",
        status=Ride.ACCEPTED,
        driver_id=driver_id,
        accepted_at=timezone.now(),
    )

    logger.info("Ride %s accepted by driver %s", ride.id, driver_id)
    return ride


# ===================== Shared Operations =====================

def complete_ride(ride_id, store: Optional[RideStore] = None) -> Ride:
    """
    Mark an ACCEPTED ride as COMPLETED.

    Raises:
        RideNotFoundError: If the ride does not exist
        RideStateError: If the ride is not ACCEPTED
    """
    store = store or get_ride_store()

    ride = _transition(
        store,
        ride_id,
        from_status=Ride.ACCEPTED,
        action="completed",
        status=Ride.COMPLETED,
        completed_at=timezone.now(),
    )

    logger.info("Ride %s completed", ride.id)
    return ride


# ===================== Helper Functions =====================

def _transition(store: RideStore, ride_id, from_status: str, action: str, **changes) -> Ride:
    ride = store.get(ride_id)
    if ride is None:
        raise RideNotFoundError(f"Ride not found with id: {ride_id}")

    if ride.status != from_status:
        raise _state_error(ride, action)

    updated = store.transition(ride_id, from_status, **changes)
    if updated is None:
        # Another request moved the ride between our read and the conditional write
        current = store.get(ride_id)
        if current is None:
            raise RideNotFoundError(f"Ride not found with id: {ride_id}")
        raise _state_error(current, action)

    return updated


def _state_error(ride: Ride, action: str) -> RideStateError:
    logger.warning("Ride %s cannot be %s from status %s", ride.id, action, ride.status)
    return RideStateError(
        f"Ride cannot be {action}. Current status: {ride.status}",
        current_status=ride.status,
    )
