# users/services.py
"""
Cache for the ``/api/auth/me/`` payload.

The cached value is a convenience only: it is dropped whenever the user's
settings change and expires after ``CURRENT_USER_CACHE_TTL`` seconds.
"""

import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)


class CurrentUserCacheService:
    """
    Read-through cache of the serialized current user.
    """

    @staticmethod
    def cache_key(user_id):
        return f"current_user_{user_id}"

    @staticmethod
    def get_or_build(user, builder):
        """
        Return the cached payload for ``user`` or build and cache it.

        Args:
            user: Authenticated user
            builder: Callable producing the payload from the user

        Returns:
            dict: Serialized current user
        """
        cache_key = CurrentUserCacheService.cache_key(user.id)

        cached_data = cache.get(cache_key)
        if cached_data is not None:
            logger.debug(
                "Current user cache hit",
                extra={
                    "user_id": user.id,
                    "action": "current_user_cache_hit",
                    "component": "CurrentUserCacheService",
                },
            )
            return cached_data

        data = builder(user)
        cache.set(cache_key, data, getattr(settings, "CURRENT_USER_CACHE_TTL", 60))

        logger.debug(
            "Current user cache miss - payload cached",
            extra={
                "user_id": user.id,
                "action": "current_user_cache_miss",
                "component": "CurrentUserCacheService",
            },
        )
        return data

    @staticmethod
    def invalidate(user_id):
        cache.delete(CurrentUserCacheService.cache_key(user_id))
        logger.debug(
            "Current user cache invalidated",
            extra={
                "user_id": user_id,
                "action": "current_user_cache_invalidated",
                "component": "CurrentUserCacheService",
            },
        )
