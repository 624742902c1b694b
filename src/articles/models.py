"""Articles and the tags attached to them."""

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone
from django.utils.text import slugify

# Slugs that would shadow a fixed route under /articles/.
RESERVED_SLUGS = frozenset({"feed"})
SLUG_MAX_LENGTH = 255


class Tag(models.Model):
    name = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


class Article(models.Model):
    """A post owned by its author; the slug is fixed the first time it is saved."""

    slug = models.SlugField(max_length=SLUG_MAX_LENGTH, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    body = models.TextField()
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="articles")
    tags = models.ManyToManyField(Tag, related_name="articles", blank=True)
    favorited_by = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="favorites", blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self.generate_slug(self.title)
        super().save(*args, **kwargs)

    @classmethod
    def generate_slug(cls, title: str) -> str:
        """Slugify ``title``, adding -2, -3, ... while the slug is reserved or taken.

        "Test Title" becomes "test-title".
        """
        base = slugify(title)[: SLUG_MAX_LENGTH - 10].strip("-") or "article"
        slug, suffix = base, 2
        while slug in RESERVED_SLUGS or cls.objects.filter(slug=slug).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    @property
    def favorites_count(self) -> int:
        return self.favorited_by.count()

    @property
    def tag_list(self) -> list[str]:
        return [tag.name for tag in self.tags.all()]

    def set_tags(self, names) -> None:
        """Replace the article's tags, creating unknown tag names on the fly."""
        unique_names = dict.fromkeys(name.strip() for name in names if name and name.strip())
        with transaction.atomic():
            tags = [Tag.objects.get_or_create(name=name)[0] for name in unique_names]
            self.tags.set(tags)


__all__ = ["Article", "Tag", "RESERVED_SLUGS"]
