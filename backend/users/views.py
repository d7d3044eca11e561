"""
Authentication views.

JWT login (rate limited per client IP), token refresh and the current user
endpoint. Responses use the same success/error envelope as the finance API.
"""

import logging

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from finance.mixins.envelope import EnvelopeResponseMixin

from .serializers import CurrentUserSerializer
from .services import CurrentUserCacheService

# Get logger for this module
logger = logging.getLogger(__name__)


class LoginView(EnvelopeResponseMixin, TokenObtainPairView):
    """
    Username/password login returning an access and a refresh token.

    Throttled with the ``auth`` scope (5 requests per minute per IP).
    """

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        logger.info(
            "User logged in",
            extra={
                "username": request.data.get("username"),
                "action": "user_login",
                "component": "LoginView",
            },
        )
        return response


class RefreshView(EnvelopeResponseMixin, TokenRefreshView):
    pass


class CurrentUserView(EnvelopeResponseMixin, APIView):
    """Current user profile, served from a short-lived cache."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = CurrentUserCacheService.get_or_build(
            request.user, lambda user: CurrentUserSerializer(user).data
        )
        return Response(data)
