"""
Uniform error responses.

Every failure leaves the API with the same body:

    {"error": <kind>, "message": <text>, "timestamp": <iso8601>, "status": <http status>}
"""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from django.utils import timezone
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback

from .exceptions import ForbiddenError, InternalError, ServiceError

logger = logging.getLogger(__name__)


def error_body(error, message, status_code):
    return {
        "error": error,
        "message": message,
        "timestamp": timezone.now().isoformat(),
        "status": status_code,
    }


def flatten_errors(detail):
    """Turn DRF error detail (dict/list/str) into "field: message" strings."""
    if isinstance(detail, dict):
        messages = []
        for field, value in detail.items():
            for message in flatten_errors(value):
                if field in ("non_field_errors", "detail"):
                    messages.append(message)
                else:
                    messages.append(f"{field}: {message}")
        return messages
    if isinstance(detail, (list, tuple)):
        messages = []
        for item in detail:
            messages.extend(flatten_errors(item))
        return messages
    return [str(detail)]


def _kind_for_status(status_code):
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "UNAUTHORIZED"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "FORBIDDEN"
    return None


def api_exception_handler(exc, context):
    """DRF EXCEPTION_HANDLER producing the uniform error body."""
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or "Not found")
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied(str(exc) or None)

    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error("Service error: %s", exc.message)
        message = exc.message
        if isinstance(exc, ForbiddenError):
            message = f"Access denied: {message}"
        set_rollback()
        return Response(
            error_body(exc.error, message, exc.status_code),
            status=exc.status_code,
        )

    if isinstance(exc, exceptions.APIException):
        headers = {}
        if getattr(exc, "auth_header", None):
            headers["WWW-Authenticate"] = exc.auth_header
        if getattr(exc, "wait", None):
            headers["Retry-After"] = "%d" % exc.wait

        message = "; ".join(flatten_errors(exc.detail))

        if isinstance(exc, exceptions.ValidationError):
            error = "VALIDATION_ERROR"
        elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
            # DRF downgrades these to 403 when no WWW-Authenticate header applies
            error = _kind_for_status(exc.status_code) or "UNAUTHORIZED"
        elif isinstance(exc, exceptions.PermissionDenied):
            error = "FORBIDDEN"
            message = f"Access denied: {message}"
        elif isinstance(exc, exceptions.NotFound):
            error = "NOT_FOUND"
        else:
            error = str(exc.default_code).upper()

        set_rollback()
        return Response(
            error_body(error, message, exc.status_code),
            status=exc.status_code,
            headers=headers,
        )

    logger.exception("Unhandled error in %s", context.get("view").__class__.__name__)
    internal = InternalError(f"An unexpected error occurred: {exc}")
    set_rollback()
    return Response(
        error_body(internal.error, internal.message, internal.status_code),
        status=internal.status_code,
    )
