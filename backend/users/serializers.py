"""
Serializers for the authenticated user.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from finance.serializers import UserSettingsSerializer

User = get_user_model()


class CurrentUserSerializer(serializers.ModelSerializer):
    """Profile of the requesting user together with their settings."""

    settings = UserSettingsSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "date_joined",
            "settings",
        ]
        read_only_fields = fields
