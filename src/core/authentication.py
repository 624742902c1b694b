"""Authentication helpers that bridge JWT middleware into DRF.

``JWTAuthMiddleware`` resolves the acting user before DRF runs; this module
surfaces that user to DRF and hands it to view handlers as an explicit
``viewer`` argument.
"""

import functools
from typing import Any, Optional, Tuple

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import SessionAuthentication


class MiddlewareUserAuthentication(SessionAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF.

    No credential parsing happens here. Users resolved from a bearer token are
    accepted as is; users resolved from the session cookie go through DRF's
    CSRF check, as with ``SessionAuthentication``.
    """

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        user = getattr(django_request, "user", None)
        if user is None or isinstance(user, AnonymousUser):
            return None

        if not getattr(user, "is_authenticated", False):
            return None

        if getattr(django_request, "auth_source", None) == "session":
            self.enforce_csrf(request)

        return user, None

    def authenticate_header(self, request) -> str:
        # A non-empty header keeps DRF from downgrading 401 to 403.
        return 'Bearer realm="api"'


def with_viewer(handler):
    """Call ``handler(self, request, viewer, ...)`` with the resolved user or None."""

    @functools.wraps(handler)
    def wrapper(self, request, *args, **kwargs):
        user = request.user
        viewer = user if getattr(user, "is_authenticated", False) else None
        return handler(self, request, viewer, *args, **kwargs)

    return wrapper


__all__ = ["MiddlewareUserAuthentication", "with_viewer"]
