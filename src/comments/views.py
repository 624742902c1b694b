"""Comment endpoints scoped to an article slug."""

import logging

from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticatedOrReadOnly

from articles.models import Article
from articles.serializers import viewer_context
from core.authentication import with_viewer
from core.exceptions import NotFound
from core.permissions import IsAuthorOrReadOnly
from core.response import BaseViewSet
from .models import Comment
from .serializers import CommentInputSerializer, CommentSerializer

logger = logging.getLogger(__name__)


class CommentViewSet(BaseViewSet):
    serializer_class = CommentSerializer
    permission_classes = [IsAuthenticatedOrReadOnly, IsAuthorOrReadOnly]
    lookup_value_regex = "[0-9]+"
    ownership_actions = {"destroy": "delete"}

    def get_article(self) -> Article:
        try:
            return Article.objects.get(slug=self.kwargs["article_slug"])
        except Article.DoesNotExist:
            raise NotFound("Article not found")

    def get_comment(self, article: Article) -> Comment:
        try:
            comment = article.comments.select_related("author").get(pk=self.kwargs["pk"])
        except Comment.DoesNotExist:
            raise NotFound("Comment not found", location=self._article_path())
        self.check_object_permissions(self.request, comment)
        return comment

    @with_viewer
    def list(self, request, viewer, article_slug=None):
        article = self.get_article()
        comments = article.comments.select_related("author")
        data = CommentSerializer(comments, many=True, context=viewer_context(viewer)).data
        return self.responder.success({"comments": data})

    @with_viewer
    def create(self, request, viewer, article_slug=None):
        article = self.get_article()
        serializer = CommentInputSerializer(data=self.request_body(request.data, "comment"))
        serializer.is_valid(raise_exception=True)
        comment = serializer.save(article=article, author=viewer)
        logger.info("User %s commented on %s", viewer.username, article.slug)
        return self.responder.success(
            {"comment": CommentSerializer(comment, context=viewer_context(viewer)).data},
            status=status.HTTP_201_CREATED,
            notice="Comment added.",
            location=self._article_path(),
        )

    @with_viewer
    def destroy(self, request, viewer, article_slug=None, pk=None):
        article = self.get_article()
        comment = self.get_comment(article)
        comment.delete()
        logger.info("User %s deleted comment %s on %s", viewer.username, pk, article.slug)
        message = "Comment deleted successfully"
        return self.responder.success({"message": message}, notice=message, location=self._article_path())

    def _article_path(self) -> str:
        return reverse("article-detail", kwargs={"slug": self.kwargs["article_slug"]})

    def failure_location(self, exc):
        if isinstance(exc, PermissionDenied):
            return self._article_path()
        return super().failure_location(exc)


__all__ = ["CommentViewSet"]
