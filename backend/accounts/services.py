"""Registration and login."""

import logging

from common.exceptions import AuthError, ConflictError, ValidationError
from .models import User
from .stores import get_user_store
from .tokens import issue_token

logger = logging.getLogger(__name__)

ALLOWED_ROLES = {User.PASSENGER, User.DRIVER}


def register_user(username, password, role, store=None) -> User:
    """
    Create a passenger or driver account.

    Raises:
        ValidationError: missing field or unknown role
        ConflictError: username already taken
    """
    store = store or get_user_store()

    missing = [
        name for name, value in (("username", username), ("password", password), ("role", role))
        if not value or not str(value).strip()
    ]
    if missing:
        raise ValidationError("; ".join(f"{name}: This field is required." for name in missing))

    if role not in ALLOWED_ROLES:
        raise ValidationError(
            f"role: must be one of {', '.join(sorted(ALLOWED_ROLES))}"
        )

    username = username.strip()
    if store.exists(username):
        raise ConflictError("Username already exists")

    user = store.create(username=username, password=password, role=role)
    logger.info("Registered user %s with role %s", user.username, user.role)
    return user


def login_user(username, password, store=None) -> str:
    """
    Check credentials and issue an access token.

    Unknown usernames and wrong passwords fail the same way.
    """
    store = store or get_user_store()

    user = store.get_by_username(username) if username else None
    if user is None or not user.is_active or not user.check_password(password or ""):
        logger.warning("Rejected login for username=%s", username)
        raise AuthError("Invalid username or password")

    return issue_token(user.username, user.role)
