"""
Ride store.

Two backends share the `RideStore` interface:

- `DjangoRideStore` persists through the ORM. State transitions are a single
  conditional UPDATE (`... WHERE id = X AND status = EXPECTED`), so two
  concurrent writers can never both move the same ride out of a state.
- `InMemoryRideStore` keeps rides in a dict behind a lock. Used by the unit
  tests and handy for local experiments.

The active backend is picked by settings.RIDESHARE["RIDE_STORE"].
"""

import itertools
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import List, Optional

from django.conf import settings
from django.utils.module_loading import import_string

from .models import Ride


class RideStore(ABC):

    @abstractmethod
    def add(self, ride: Ride) -> Ride:
        """Persist a new ride and return it with its id assigned."""

    @abstractmethod
    def get(self, ride_id) -> Optional[Ride]:
        ...

    @abstractmethod
    def transition(self, ride_id, from_status: str, **changes) -> Optional[Ride]:
        """
        Apply `changes` only if the ride is currently in `from_status`.

        Returns the updated ride, or None when no ride matched (missing or
        already moved to another status).
        """

    @abstractmethod
    def list_by_status(self, status: str) -> List[Ride]:
        ...

    @abstractmethod
    def list_by_requester(self, user_id) -> List[Ride]:
        ...


class DjangoRideStore(RideStore):

    def add(self, ride):
        ride.save()
        return ride

    def get(self, ride_id):
        try:
            return Ride.objects.get(pk=ride_id)
        except (Ride.DoesNotExist, ValueError):
            return None

    def transition(self, ride_id, from_status, **changes):
        updated = Ride.objects.filter(pk=ride_id, status=from_status).update(**changes)
        if not updated:
            return None
        return Ride.objects.get(pk=ride_id)

    def list_by_status(self, status):
        return list(Ride.objects.filter(status=status))

    def list_by_requester(self, user_id):
        return list(Ride.objects.filter(passenger_id=user_id))


def _clone(ride):
    return Ride(**{
        field.attname: getattr(ride, field.attname)
        for field in Ride._meta.concrete_fields
    })


class InMemoryRideStore(RideStore):

    def __init__(self):
        self._rides = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, ride):
        with self._lock:
            ride.id = next(self._ids)
            self._rides[ride.id] = _clone(ride)
            return ride

    def get(self, ride_id):
        with self._lock:
            ride = self._rides.get(ride_id)
            return _clone(ride) if ride is not None else None

    def transition(self, ride_id, from_status, **changes):
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None or ride.status != from_status:
                return None
            for attr, value in changes.items():
                setattr(ride, attr, value)
            return _clone(ride)

    def list_by_status(self, status):
        with self._lock:
            return [_clone(r) for r in self._rides.values() if r.status == status]

    def list_by_requester(self, user_id):
        with self._lock:
            return [_clone(r) for r in self._rides.values() if r.passenger_id == user_id]


@lru_cache
def _load_store(path):
    return import_string(path)()


def get_ride_store() -> RideStore:
    return _load_store(settings.RIDESHARE["RIDE_STORE"])
