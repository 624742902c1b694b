"""Shared helpers for tests (user creation, authenticated clients, fake Redis)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from users.services import TokenService

User = get_user_model()

DEFAULT_PASSWORD = "Password123"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class FakeRedisMixin:
    """Patch both Redis entry points with a shared in-memory FakeRedis for a TestCase."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("users.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()


def create_user(username: str, password: str = DEFAULT_PASSWORD, **extra):
    """Create a user with a bcrypt-hashed password and an example.com email."""

    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create_user(username=username, password=password, **extra)


def auth_client(user) -> APIClient:
    """Return an APIClient authenticated with a fresh access token."""
    token, _ = TokenService.generate_tokens(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


def browser_client(user=None) -> APIClient:
    """Return an APIClient that negotiates HTML, logged in through the session if a user is given."""
    client = APIClient(HTTP_ACCEPT="text/html")
    if user is not None:
        session = client.session
        session["user_id"] = str(user.id)
        session.save()
    return client
