"""App configuration for user accounts."""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Users app holds the custom User model, token service, and account endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
