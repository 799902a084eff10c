from rest_framework.permissions import BasePermission

from common.exceptions import ForbiddenError

from .models import User

ROLE_LABELS = dict(User.ROLE_CHOICES)


def role_required(role):
    """
    Build a permission class that only lets callers with `role` through.

    The role is read from the verified token claims; requests authenticated
    without a token (e.g. force_authenticate in tests) fall back to the user record.
    """

    class HasRole(BasePermission):
        required_role = role
        message = f"{ROLE_LABELS.get(role, role)} role required"

        def has_permission(self, request, view):
            user = getattr(request, "user", None)
            if not user or not user.is_authenticated:
                return False
            claims = getattr(request, "auth", None)
            caller_role = getattr(claims, "role", None) or getattr(user, "role", None)
            if caller_role != self.required_role:
                raise ForbiddenError(self.message)
            return True

    HasRole.__name__ = f"HasRole_{role}"
    return HasRole
