"""Response strategies and the base view that selects between them.

API clients get plain JSON bodies. Browser clients get redirects carrying a
flash notice/alert (via ``django.contrib.messages``), or a rendered page when
there is nowhere to redirect to. Which strategy applies is decided once per
request by DRF content negotiation (``Accept`` header or ``?format=``).
"""

from typing import Any, Iterable, Mapping

from django.contrib import messages
from django.http import HttpResponseRedirect
from rest_framework import status as http_status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, NotFound
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet


class JSONResponder:
    """Serialize outcomes as JSON bodies; notices and redirect targets are ignored."""

    format = "json"

    def __init__(self, request):
        self.request = request

    # noinspection PyMethodMayBeStatic
    def success(
        self,
        payload: Any = None,
        *,
        status: int = http_status.HTTP_200_OK,
        notice: str | None = None,
        location: str | None = None,
    ) -> Response:
        if status == http_status.HTTP_204_NO_CONTENT:
            # 204 responses must not include a body.
            return Response(status=status)
        return Response(payload, status=status)

    # noinspection PyMethodMayBeStatic
    def failure(
        self,
        errors: Iterable[str],
        *,
        status: int,
        alert: str | None = None,
        location: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        return Response({"errors": list(errors)}, status=status, headers=headers)


class HTMLResponder:
    """Redirect with a flash message, or render the page when no target is given."""

    format = "html"

    def __init__(self, request):
        self.request = request

    @property
    def _django_request(self):
        return getattr(self.request, "_request", self.request)

    def success(
        self,
        payload: Any = None,
        *,
        status: int = http_status.HTTP_200_OK,
        notice: str | None = None,
        location: str | None = None,
    ):
        if notice:
            messages.success(self._django_request, notice)
        if location:
            return HttpResponseRedirect(location)
        return Response(payload, status=status)

    def failure(
        self,
        errors: Iterable[str],
        *,
        status: int,
        alert: str | None = None,
        location: str | None = None,
        headers: Mapping[str, str] | None = None,
    ):
        errors = list(errors)
        message = alert or (errors[0] if errors else None)
        if message:
            messages.error(self._django_request, message)
        if location:
            return HttpResponseRedirect(location)
        return Response({"errors": errors}, status=status)


RESPONDERS = {responder.format: responder for responder in (JSONResponder, HTMLResponder)}


def select_responder(request) -> JSONResponder | HTMLResponder:
    """Pick the strategy matching the renderer DRF negotiated for ``request``."""

    renderer = getattr(request, "accepted_renderer", None)
    responder_cls = RESPONDERS.get(getattr(renderer, "format", None), JSONResponder)
    return responder_cls(request)


class ResponderMixin:
    """Give views a negotiated responder plus hooks used by the exception handler."""

    @property
    def responder(self) -> JSONResponder | HTMLResponder:
        return select_responder(self.request)  # type: ignore[attr-defined]

    @staticmethod
    def request_body(data: Any, root: str) -> Any:
        """Return the ``root``-wrapped payload, or the flat form data browsers send."""
        if isinstance(data, Mapping) and isinstance(data.get(root), Mapping):
            return data[root]
        return data

    # noinspection PyMethodMayBeStatic
    def failure_location(self, exc: Exception) -> str | None:
        """Where browser clients are redirected after ``exc``; None re-renders the page."""
        if isinstance(exc, (NotFound, NotAuthenticated, AuthenticationFailed)):
            return "/"
        return None

    # noinspection PyMethodMayBeStatic
    def failure_alert(self, exc: Exception) -> str | None:
        """Flash alert shown to browser clients; None falls back to the first error."""
        return None


class BaseAPIView(ResponderMixin, APIView):
    """APIView with response-strategy selection."""


class BaseViewSet(ResponderMixin, GenericViewSet):
    """GenericViewSet with response-strategy selection; actions are declared explicitly."""


__all__ = [
    "BaseAPIView",
    "BaseViewSet",
    "HTMLResponder",
    "JSONResponder",
    "select_responder",
]
