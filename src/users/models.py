"""Conduit user: bcrypt-hashed credentials, profile fields, follows and favorites.

Favorites live on ``Article.favorited_by`` (reverse accessor ``favorites``)
so the users app does not depend on the articles migrations.
"""

import uuid
from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from .managers import UserManager


class User(AbstractBaseUser):
    """Author and reader, identified by email for login and username in URLs."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=150, unique=True)
    email = models.EmailField(unique=True)
    password_hash = models.CharField(max_length=128)
    bio = models.TextField(blank=True)
    image = models.CharField(max_length=512, blank=True)
    following = models.ManyToManyField("self", symmetrical=False, related_name="followers", blank=True)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["username"]

    objects = UserManager()

    class Meta:
        ordering = ["-date_joined"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.username

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)

    # Favorites

    def has_favorited(self, article) -> bool:
        return self.favorites.filter(pk=article.pk).exists()

    def favorite(self, article) -> None:
        self.favorites.add(article)

    def unfavorite(self, article) -> None:
        self.favorites.remove(article)

    # Follows

    def is_following(self, other: "User") -> bool:
        return self.following.filter(pk=other.pk).exists()

    def follow(self, other: "User") -> None:
        self.following.add(other)

    def unfollow(self, other: "User") -> None:
        self.following.remove(other)

    # Articles

    def feed(self):
        """Articles written by the authors this user follows, newest first."""
        from articles.models import Article

        return Article.objects.filter(author__in=self.following.all())

    def find_article_by_slug(self, slug: str):
        """Return this user's own article with ``slug``, or None."""
        return self.articles.filter(slug=slug).first()


__all__ = ["User"]
