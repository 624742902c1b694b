"""Routing for comments nested under an article slug."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CommentViewSet

router = SimpleRouter()
router.register(r"articles/(?P<article_slug>[-a-zA-Z0-9_]+)/comments", CommentViewSet, basename="comment")

urlpatterns = [
    path("", include(router.urls)),
]
