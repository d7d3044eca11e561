import logging
import time

from django.conf import settings
from django.db import connection

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """
    Logs one structured line per API request with status and duration.
    Query counts are added when DEBUG is on.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        initial_queries = len(connection.queries) if settings.DEBUG else 0

        response = self.get_response(request)

        duration_ms = round((time.monotonic() - started) * 1000, 2)
        query_count = (
            len(connection.queries) - initial_queries if settings.DEBUG else None
        )
        self._log_request(request, response, duration_ms, query_count)

        return response

    def _log_request(self, request, response, duration_ms, query_count):
        """Logs request metrics with a level that follows status and latency."""
        user = getattr(request, "user", None)
        extra_context = {
            "request_path": request.path,
            "request_method": request.method,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "user_id": user.id if user is not None and user.is_authenticated else None,
            "action": "request_completed",
            "component": "RequestLoggingMiddleware",
        }
        if query_count is not None:
            extra_context["query_count"] = query_count

        slow_threshold = getattr(settings, "SLOW_REQUEST_THRESHOLD_MS", 1000)

        if response.status_code >= 500:
            logger.error(
                "Request failed",
                extra={**extra_context, "severity": "high"},
            )
        elif duration_ms >= slow_threshold:
            logger.warning(
                "Slow request detected",
                extra={
                    **extra_context,
                    "severity": "medium",
                    "threshold_ms": slow_threshold,
                },
            )
        else:
            logger.debug("Request completed", extra=extra_context)
