"""
Credential store.

`DjangoUserStore` persists users through the ORM; `InMemoryUserStore` keeps
them in a dict so the auth service can be exercised without a database.
The active backend is picked by settings.RIDESHARE["USER_STORE"].
"""

import itertools
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils.module_loading import import_string

from common.exceptions import ConflictError
from .models import User


class UserStore(ABC):

    @abstractmethod
    def exists(self, username: str) -> bool:
        ...

    @abstractmethod
    def create(self, username: str, password: str, role: str) -> User:
        """Persist a new user with a hashed password. Raises ConflictError on duplicates."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        ...


class DjangoUserStore(UserStore):

    def exists(self, username):
        return User.objects.filter(username=username).exists()

    def create(self, username, password, role):
        try:
            with transaction.atomic():
                return User.objects.create_user(
                    username=username,
                    password=password,
                    role=role,
                )
        except IntegrityError:
            # Lost a race with a concurrent registration of the same username
            raise ConflictError("Username already exists")

    def get_by_username(self, username):
        try:
            return User.objects.get(username=username)
        except User.DoesNotExist:
            return None


class InMemoryUserStore(UserStore):

    def __init__(self):
        self._users = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def exists(self, username):
        with self._lock:
            return username in self._users

    def create(self, username, password, role):
        with self._lock:
            if username in self._users:
                raise ConflictError("Username already exists")
            user = User(id=next(self._ids), username=username, role=role)
            user.set_password(password)
            self._users[username] = user
            return user

    def get_by_username(self, username):
        with self._lock:
            return self._users.get(username)


@lru_cache
def _load_store(path):
    return import_string(path)()


def get_user_store() -> UserStore:
    return _load_store(settings.RIDESHARE["USER_STORE"])
