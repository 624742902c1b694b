"""Routing for the Article viewset (CRUD, feed, edit, favorite/unfavorite)."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import ArticleViewSet

router = SimpleRouter()
router.register(r"articles", ArticleViewSet, basename="article")

urlpatterns = [
    path("", include(router.urls)),
]
