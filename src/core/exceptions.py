"""Error kinds and the exception handler that maps them onto responses.

Every failure ends up as ``{"errors": [...]}`` for API clients or as a
redirect (or re-rendered page) carrying a flash alert for browser clients;
the strategy is picked by :func:`core.response.select_responder`.
"""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler as drf_exception_handler

from core.response import select_responder
from users.services import BlocklistUnavailable

logger = logging.getLogger(__name__)

GENERIC_AUTH_ERROR = "Authentication credentials were not provided or are invalid, or the token was revoked."
INVALID_CREDENTIALS = "invalid_credentials"


class NotFound(exceptions.NotFound):
    """A slug or id lookup missed. Browsers are sent back to the index."""

    def __init__(self, detail=None, code=None, *, location: str = "/"):
        super().__init__(detail, code)
        self.location = location


class Conflict(exceptions.APIException):
    """The requested state change is redundant (e.g. favoriting twice)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource is already in the requested state."
    default_code = "conflict"

    def __init__(self, detail=None, code=None, *, location: str | None = None):
        super().__init__(detail, code)
        self.location = location


def _normalize_errors(payload: Any) -> list[str]:
    """Flatten DRF's nested error payloads into a list of readable strings."""

    if isinstance(payload, dict):
        if set(payload) == {"detail"}:
            return [str(payload["detail"])]
        errors: list[str] = []
        for field, value in payload.items():
            for message in _normalize_errors(value):
                if field == api_settings.NON_FIELD_ERRORS_KEY:
                    errors.append(message)
                else:
                    errors.append(f"{field}: {message}")
        return errors
    if isinstance(payload, list):
        return [message for item in payload for message in _normalize_errors(item)]
    return [str(payload)]


def _auth_errors(exc: Exception, payload: Any) -> list[str]:
    """Hide token-decoding details unless DEBUG_AUTH_ERRORS is enabled."""

    if getattr(settings, "DEBUG_AUTH_ERRORS", False) or isinstance(exc, exceptions.NotAuthenticated):
        return _normalize_errors(payload)
    if isinstance(exc, exceptions.AuthenticationFailed) and exc.get_codes() == INVALID_CREDENTIALS:
        return _normalize_errors(payload)
    return [GENERIC_AUTH_ERROR]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Any:
    """Map an exception to a status code and error list, then hand both to the responder."""

    headers: dict[str, str] = {}

    if isinstance(exc, BlocklistUnavailable):
        logger.error("Token blocklist unavailable: %s", exc)
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        errors = ["Authentication service unavailable (blocklist)."]
    elif isinstance(exc, DatabaseError):
        logger.error("Database error while handling request: %s", exc)
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        errors = ["Service temporarily unavailable."]
    else:
        response = drf_exception_handler(exc, context)
        if response is None:
            return None

        status_code = response.status_code
        if isinstance(exc, (exceptions.AuthenticationFailed, exceptions.NotAuthenticated)):
            status_code = status.HTTP_401_UNAUTHORIZED
            errors = _auth_errors(exc, response.data)
        else:
            errors = _normalize_errors(response.data)
        if isinstance(exc, exceptions.ValidationError):
            status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        headers = {key: value for key, value in response.items() if key != "Content-Type"}

    view = context.get("view")
    location = getattr(exc, "location", None)
    if location is None and hasattr(view, "failure_location"):
        location = view.failure_location(exc)
    alert = view.failure_alert(exc) if hasattr(view, "failure_alert") else None

    responder = select_responder(context["request"])
    return responder.failure(errors, status=status_code, alert=alert, location=location, headers=headers)


__all__ = ["NotFound", "Conflict", "custom_exception_handler", "INVALID_CREDENTIALS"]
