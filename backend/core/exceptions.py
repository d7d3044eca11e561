"""
REST framework exception handler producing the uniform error envelope.

Every failure leaving the API has the shape ``{"success": false, "error": str}``.
DRF's default handler decides the status code; this module flattens its
detail into one human-readable message and turns anything DRF does not know
about into a generic 500 so no stack trace reaches the client.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"

# Keys whose messages are shown without a field prefix
UNPREFIXED_KEYS = {"detail", "non_field_errors"}


def flatten_error_detail(detail):
    """Reduce nested DRF error detail to its first message."""
    if isinstance(detail, dict):
        if not detail:
            return ""
        key, value = next(iter(detail.items()))
        message = flatten_error_detail(value)
        if key in UNPREFIXED_KEYS:
            return message
        return f"{key}: {message}"
    if isinstance(detail, (list, tuple)):
        return flatten_error_detail(detail[0]) if detail else ""
    return str(detail)


def envelope_exception_handler(exc, context):
    """
    Translate any exception raised inside a view into the error envelope.

    Args:
        exc: The raised exception
        context: DRF context with the view and request

    Returns:
        Response: ``{"success": False, "error": message}`` with the mapped status
    """
    view = context.get("view")
    request = context.get("request")
    view_name = view.__class__.__name__ if view else None
    user_id = getattr(getattr(request, "user", None), "id", None)

    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(
            exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        )
    elif isinstance(exc, Http404):
        # Missing and foreign rows share one message
        exc = NotFound()

    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            "Unhandled exception converted to generic error",
            extra={
                "view": view_name,
                "user_id": user_id,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "action": "unhandled_exception",
                "component": "envelope_exception_handler",
                "severity": "critical",
            },
            exc_info=exc,
        )
        return Response(
            {"success": False, "error": GENERIC_ERROR_MESSAGE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    message = flatten_error_detail(response.data)
    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        message = GENERIC_ERROR_MESSAGE

    logger.info(
        "API error response",
        extra={
            "view": view_name,
            "user_id": user_id,
            "status_code": response.status_code,
            "error_type": type(exc).__name__,
            "error_message": message,
            "action": "api_error_response",
            "component": "envelope_exception_handler",
        },
    )

    response.data = {"success": False, "error": message}
    return response
