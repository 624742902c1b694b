"""Article endpoints: global index and personal feed, CRUD, and favorites."""

import logging
from urllib.parse import urlsplit

from django.urls import reverse
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly

from core.authentication import with_viewer
from core.exceptions import Conflict, NotFound
from core.permissions import IsAuthorOrReadOnly
from core.response import BaseViewSet
from .models import Article, Tag
from .serializers import ArticleInputSerializer, ArticleSerializer, viewer_context

logger = logging.getLogger(__name__)

PERSONAL_FEED = "your"


def article_path(slug: str) -> str:
    return reverse("article-detail", kwargs={"slug": slug})


class ArticleViewSet(BaseViewSet):
    serializer_class = ArticleSerializer
    permission_classes = [IsAuthenticatedOrReadOnly, IsAuthorOrReadOnly]
    lookup_field = "slug"
    lookup_value_regex = "[-a-zA-Z0-9_]+"
    ownership_actions = {
        "edit": "edit",
        "update": "update",
        "partial_update": "update",
        "destroy": "delete",
    }

    def get_queryset(self):
        return Article.objects.select_related("author").prefetch_related("tags")

    def get_article(self) -> Article:
        """Resolve the slug in the URL, enforcing ownership for owner-only actions."""
        try:
            article = self.get_queryset().get(slug=self.kwargs[self.lookup_field])
        except Article.DoesNotExist:
            raise NotFound("Article not found")
        self.check_object_permissions(self.request, article)
        return article

    @with_viewer
    def list(self, request, viewer):
        """Personal feed with ``?feed=your`` when logged in, otherwise every article."""
        context = viewer_context(viewer)
        personal = request.query_params.get("feed") == PERSONAL_FEED and viewer is not None
        articles = viewer.feed() if personal else self.get_queryset()
        articles = articles.select_related("author").prefetch_related("tags")

        entries = [
            {
                "article": ArticleSerializer(article, context=context).data,
                "favorited": article.pk in context["favorite_ids"] if viewer else None,
                "global": not personal,
            }
            for article in articles
        ]
        tags = list(Tag.objects.values_list("name", flat=True))
        return self.responder.success({"articles": entries, "tags": tags})

    @with_viewer
    def retrieve(self, request, viewer, slug=None):
        article = self.get_article()
        return self.responder.success({"article": ArticleSerializer(article, context=viewer_context(viewer)).data})

    @with_viewer
    def create(self, request, viewer):
        serializer = ArticleInputSerializer(data=self.request_body(request.data, "article"))
        serializer.is_valid(raise_exception=True)
        article = serializer.save(author=viewer)
        logger.info("User %s created article %s", viewer.username, article.slug)
        return self.responder.success(
            {"article": ArticleSerializer(article, context=viewer_context(viewer)).data},
            status=status.HTTP_201_CREATED,
            notice="Article created successfully.",
            location=article_path(article.slug),
        )

    @action(detail=True, methods=["get"], permission_classes=[IsAuthenticated, IsAuthorOrReadOnly])
    @with_viewer
    def edit(self, request, viewer, slug=None):
        """Return the article for editing; only its author may open it."""
        article = self.get_article()
        return self.responder.success({"article": ArticleSerializer(article, context=viewer_context(viewer)).data})

    @with_viewer
    def update(self, request, viewer, slug=None):
        """Apply whichever permitted fields were sent; PUT and PATCH behave alike."""
        article = self.get_article()
        serializer = ArticleInputSerializer(
            article, data=self.request_body(request.data, "article"), partial=True
        )
        serializer.is_valid(raise_exception=True)
        article = serializer.save()
        return self.responder.success(
            {"article": ArticleSerializer(article, context=viewer_context(viewer)).data},
            notice="Article updated successfully.",
            location=article_path(article.slug),
        )

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    @with_viewer
    def destroy(self, request, viewer, slug=None):
        article = self.get_article()
        article.delete()
        logger.info("User %s deleted article %s", viewer.username, slug)
        return self.responder.success(
            status=status.HTTP_204_NO_CONTENT,
            notice="Article deleted successfully.",
            location=reverse("article-list"),
        )

    @action(detail=False, methods=["get"], permission_classes=[IsAuthenticated])
    @with_viewer
    def feed(self, request, viewer):
        """Articles by the authors the viewer follows."""
        articles = list(viewer.feed().select_related("author").prefetch_related("tags"))
        data = ArticleSerializer(articles, many=True, context=viewer_context(viewer)).data
        return self.responder.success({"articles": data, "articlesCount": len(articles)})

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    @with_viewer
    def favorite(self, request, viewer, slug=None):
        article = self.get_article()
        if viewer.has_favorited(article):
            raise Conflict("Article already favorited", location=self._favorite_return_path(article))
        viewer.favorite(article)
        return self.responder.success(
            {"article": ArticleSerializer(article, context=viewer_context(viewer)).data},
            notice="Article favorited successfully.",
            location=self._favorite_return_path(article),
        )

    @action(detail=True, methods=["delete"], permission_classes=[IsAuthenticated])
    @with_viewer
    def unfavorite(self, request, viewer, slug=None):
        article = self.get_article()
        if not viewer.has_favorited(article):
            raise Conflict("Article not favorited", location=self._favorite_return_path(article))
        viewer.unfavorite(article)
        return self.responder.success(
            {"article": ArticleSerializer(article, context=viewer_context(viewer)).data},
            notice="Article unfavorited successfully.",
            location=self._favorite_return_path(article),
        )

    def _favorite_return_path(self, article: Article) -> str:
        """Browsers that favorited from the index go back to it, others to the article."""
        referer = self.request.META.get("HTTP_REFERER")
        if referer and urlsplit(referer).path == reverse("root"):
            return reverse("root")
        return article_path(article.slug)

    def failure_location(self, exc):
        slug = self.kwargs.get(self.lookup_field)
        if isinstance(exc, PermissionDenied) and slug:
            return article_path(slug)
        if isinstance(exc, ValidationError) and self.action in ("update", "partial_update") and slug:
            return article_path(slug)
        return super().failure_location(exc)

    def failure_alert(self, exc):
        if isinstance(exc, ValidationError):
            if self.action == "create":
                return "There were errors saving your article."
            return "There were errors updating your article."
        return None


__all__ = ["ArticleViewSet"]
