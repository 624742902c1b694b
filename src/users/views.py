"""User endpoints: registration, login, refresh, logout, profiles, and follows."""

import logging
import uuid
from typing import Any

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly

from articles.serializers import ArticleSerializer, viewer_context
from core.authentication import with_viewer
from core.exceptions import NotFound
from core.response import BaseAPIView
from .serializers import (
    LoginSerializer,
    ProfileSerializer,
    RegisterSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from .services import TokenService, end_session, start_session

logger = logging.getLogger(__name__)

User = get_user_model()

CURRENT_USER = "me"


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Register a new user; browsers are sent on to log in."""
        serializer = RegisterSerializer(data=self.request_body(request.data, "user"))
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered user %s", user.username)
        notice = "User created successfully. Please log in."
        return self.responder.success(
            {"user": UserSerializer(user).data, "message": notice},
            status=status.HTTP_201_CREATED,
            notice=notice,
            location="/",
        )


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Verify credentials and issue access + refresh tokens (and a browser session)."""
        serializer = LoginSerializer(data=self.request_body(request.data, "user"))
        try:
            serializer.is_valid(raise_exception=True)
        except AuthenticationFailed:
            logger.info("Failed login for %s", serializer.initial_data.get("email") or "<missing email>")
            raise
        user = serializer.validated_data["user"]
        access, refresh = TokenService.generate_tokens(user)
        if self.responder.format == "html":
            start_session(request, user)
        logger.info("User %s logged in", user.username)
        return self.responder.success(
            {"user": UserSerializer(user).data, "token": access, "refresh": refresh},
            notice="Logged in successfully",
            location=f"/users/{CURRENT_USER}/",
        )

    def failure_location(self, exc):
        # Failed logins re-render the form.
        return None


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Exchange a valid refresh token for new access/refresh tokens."""
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            raise AuthenticationFailed("Refresh token required")

        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        if TokenService.is_token_blocked(payload["jti"]):
            raise AuthenticationFailed("Refresh token revoked")

        user = _get_active_user(payload.get("sub"))
        if not user:
            raise AuthenticationFailed("User not found or inactive")

        # Refresh tokens are single use.
        TokenService.block_token(payload["jti"], payload["exp"])
        access, new_refresh = TokenService.generate_tokens(user)
        return self.responder.success({"token": access, "refresh": new_refresh})


class LogoutView(BaseAPIView):
    """Revoke the current access token and end the browser session."""

    permission_classes = [IsAuthenticated]

    @with_viewer
    def post(self, request, viewer):
        payload = getattr(request, "auth_payload", None)
        if payload is not None:
            TokenService.block_token(payload["jti"], payload["exp"])
        end_session(request)
        logger.info("User %s logged out", viewer.username)
        return self.responder.success(
            status=status.HTTP_204_NO_CONTENT, notice="Logged out successfully", location="/"
        )


class UserDetailView(BaseAPIView):
    """Show a user with their articles; update your own account."""

    permission_classes = [IsAuthenticatedOrReadOnly]

    @with_viewer
    def get(self, request, viewer, lookup):
        user = self._resolve(lookup, viewer)
        articles = user.articles.select_related("author").prefetch_related("tags")
        context = viewer_context(viewer)
        return self.responder.success(
            {
                "user": UserSerializer(user).data if user == viewer else ProfileSerializer(user, context=context).data,
                "articles": ArticleSerializer(articles, many=True, context=context).data,
            }
        )

    @with_viewer
    def put(self, request, viewer, lookup):
        return self._update(request, viewer, lookup)

    @with_viewer
    def patch(self, request, viewer, lookup):
        return self._update(request, viewer, lookup)

    def _update(self, request, viewer, lookup):
        user = self._resolve(lookup, viewer)
        if user != viewer:
            raise PermissionDenied("You are not authorized to update this profile.")
        # No profile field is mandatory, so PUT behaves like PATCH.
        serializer = UserUpdateSerializer(user, data=self.request_body(request.data, "user"), partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("User %s updated their profile", user.username)
        return self.responder.success(
            {"user": UserSerializer(user).data},
            notice="Profile updated successfully.",
            location=f"/profiles/{user.username}/",
        )

    @staticmethod
    def _resolve(lookup: str, viewer):
        if lookup == CURRENT_USER:
            if viewer is None:
                raise NotAuthenticated("User not found")
            return viewer
        query = Q(username=lookup)
        try:
            query |= Q(pk=uuid.UUID(lookup))
        except ValueError:
            pass
        user = User.objects.filter(query, is_active=True).first()
        if user is None:
            raise NotFound("User not found")
        return user

    def failure_location(self, exc):
        if self.request.method in ("PUT", "PATCH"):
            return "/" if isinstance(exc, NotAuthenticated) else None
        return super().failure_location(exc)

    def failure_alert(self, exc):
        if self.request.method in ("PUT", "PATCH") and isinstance(exc, (NotAuthenticated, ValidationError)):
            return "Unable to save"
        if isinstance(exc, NotAuthenticated):
            return "User not found"
        return None


class ProfileView(BaseAPIView):
    permission_classes: list[Any] = []

    @with_viewer
    def get(self, request, viewer, username):
        profile = _get_profile(username)
        return self.responder.success({"profile": ProfileSerializer(profile, context={"viewer": viewer}).data})


class ProfileFollowView(BaseAPIView):
    """Follow or unfollow an author; the feed is built from these follows."""

    permission_classes = [IsAuthenticated]

    @with_viewer
    def post(self, request, viewer, username):
        profile = _get_profile(username)
        if profile == viewer:
            raise ValidationError("You cannot follow yourself")
        viewer.follow(profile)
        return self.responder.success(
            {"profile": ProfileSerializer(profile, context={"viewer": viewer}).data},
            notice=f"You are now following {profile.username}.",
            location=f"/profiles/{profile.username}/",
        )

    @with_viewer
    def delete(self, request, viewer, username):
        profile = _get_profile(username)
        viewer.unfollow(profile)
        return self.responder.success(
            {"profile": ProfileSerializer(profile, context={"viewer": viewer}).data},
            notice=f"You are no longer following {profile.username}.",
            location=f"/profiles/{profile.username}/",
        )


def _get_profile(username: str) -> User:
    try:
        return User.objects.get(username=username, is_active=True)
    except User.DoesNotExist:
        raise NotFound("User not found")


def _get_active_user(user_id) -> User | None:
    """Retrieve an active user by id, or None if missing/inactive."""
    if not user_id:
        return None
    try:
        return User.objects.get(id=user_id, is_active=True)
    except (User.DoesNotExist, ValueError, DjangoValidationError):
        return None
