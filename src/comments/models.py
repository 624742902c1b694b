"""Comments left on articles."""

from django.conf import settings
from django.db import models


class Comment(models.Model):
    """A reader's comment; deleted along with its article."""

    body = models.TextField()
    article = models.ForeignKey("articles.Article", on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="comments")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.body[:50]


__all__ = ["Comment"]
