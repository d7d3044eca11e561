"""
Signal handlers for the finance app.
"""

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from finance.models import UserSettings
from users.services import CurrentUserCacheService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_settings(sender, instance, created, **kwargs):
    """
    Create UserSettings when a new user is created.
    """
    if created:
        UserSettings.objects.get_or_create(user=instance)
        logger.debug(
            "User settings created",
            extra={
                "user_id": instance.id,
                "action": "user_settings_created",
                "component": "create_user_settings",
            },
        )


@receiver(post_save, sender=UserSettings)
def invalidate_current_user_cache(sender, instance, created, **kwargs):
    """
    Drop the cached ``/auth/me/`` payload whenever settings change.
    """
    if not created:
        CurrentUserCacheService.invalidate(instance.user_id)
