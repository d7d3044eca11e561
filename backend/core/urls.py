"""
Root URL configuration for the Personal Finance application.

All API routes live under ``/api/``: authentication endpoints come from the
users app and the ledger resources from the finance app.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("users.urls")),
    path("api/", include("finance.urls")),
]
