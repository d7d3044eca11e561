"""
URL configuration for user authentication.

Mounted under ``/api/auth/``.
"""

from django.urls import path

from .views import CurrentUserView, LoginView, RefreshView

app_name = "users"

urlpatterns = [
    # JWT login, throttled per client IP
    path("login/", LoginView.as_view(), name="login"),
    # JWT token refresh endpoint
    path("token/refresh/", RefreshView.as_view(), name="token_refresh"),
    # Authenticated user with settings
    path("me/", CurrentUserView.as_view(), name="me"),
]
