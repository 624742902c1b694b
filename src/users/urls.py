"""URL patterns for user accounts and author profiles."""

from django.urls import path

from .views import (
    LoginView,
    LogoutView,
    ProfileFollowView,
    ProfileView,
    RefreshView,
    RegisterView,
    UserDetailView,
)

urlpatterns = [
    path("users/", RegisterView.as_view(), name="user-register"),
    path("users/login/", LoginView.as_view(), name="user-login"),
    path("users/refresh/", RefreshView.as_view(), name="user-refresh"),
    path("users/logout/", LogoutView.as_view(), name="user-logout"),
    path("users/<str:lookup>/", UserDetailView.as_view(), name="user-detail"),
    path("profiles/<str:username>/", ProfileView.as_view(), name="profile-detail"),
    path("profiles/<str:username>/follow/", ProfileFollowView.as_view(), name="profile-follow"),
]
