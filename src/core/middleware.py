"""Middleware to authenticate requests via JWT, Redis blocklist, or session."""

import logging
from typing import Optional

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from users.models import User
from users.services import SESSION_USER_KEY, BlocklistUnavailable, TokenService

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Decode the bearer access token (or read the session) and attach request.user.

    ``request.auth_source`` records how the user was resolved: ``"token"``,
    ``"session"``, or None for anonymous requests.
    """

    def process_request(self, request):  # type: ignore[override]
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header.startswith("Bearer "):
            self._authenticate_session(request)
            return None

        token = auth_header.split(" ", 1)[1].strip()

        try:
            payload = TokenService.decode_token(token, expected_type="access")
            jti = payload.get("jti")
            if not jti:
                return _unauthorized()

            if TokenService.is_token_blocked(jti):
                return _unauthorized()

            user = self._get_user(payload.get("sub"))
            if not user or not user.is_active:
                return _unauthorized()

            request.user = user
            request.auth_source = "token"
            request.auth_payload = payload
            return None

        except AuthenticationFailed as exc:
            logger.info("Rejected bearer token: %s", exc.detail)
            return _unauthorized()
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable; rejecting request to %s", request.path)
            return _service_unavailable()

    def _authenticate_session(self, request) -> None:
        session = getattr(request, "session", None)
        user = self._get_user(session.get(SESSION_USER_KEY)) if session is not None else None
        if user is not None and user.is_active:
            request.user = user
            request.auth_source = "session"
        else:
            request.user = AnonymousUser()
            request.auth_source = None

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValidationError):
            return None


def _unauthorized() -> JsonResponse:
    return JsonResponse(
        {
            "errors": [
                "Authentication credentials were not provided or are invalid, or the token was revoked."
            ],
        },
        status=status.HTTP_401_UNAUTHORIZED,
    )


def _service_unavailable() -> JsonResponse:
    return JsonResponse(
        {"errors": ["Authentication service unavailable (blocklist)."]},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


__all__ = ["JWTAuthMiddleware"]
