"""Root URL configuration for the Conduit API."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from articles.views import ArticleViewSet

urlpatterns = [
    path("", ArticleViewSet.as_view({"get": "list"}), name="root"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("", include("users.urls")),
    path("", include("articles.urls")),
    path("", include("comments.urls")),
]
