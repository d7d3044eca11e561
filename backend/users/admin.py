"""
Django admin configuration for CustomUser model.

This module registers the CustomUser model with the Django admin interface
using the stock UserAdmin layout.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    """Admin for CustomUser with email shown in the changelist."""

    list_display = ("username", "email", "is_active", "is_staff", "date_joined")
    search_fields = ("username", "email")
