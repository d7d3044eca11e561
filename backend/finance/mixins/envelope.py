"""
Success envelope for API views.

Error responses are shaped by ``core.exceptions.envelope_exception_handler``;
this mixin shapes everything else, so clients always receive either
``{"success": true, "data": ...}`` or ``{"success": false, "error": "..."}``.
"""

import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class EnvelopeResponseMixin:
    """
    Wrap successful DRF responses in the success envelope.

    ``204 No Content`` becomes ``200`` so the envelope has a body to live in.
    """

    def finalize_response(self, request, response, *args, **kwargs):
        if (
            isinstance(response, Response)
            and response.status_code < status.HTTP_400_BAD_REQUEST
            and not getattr(response, "enveloped", False)
        ):
            if response.status_code == status.HTTP_204_NO_CONTENT:
                response.status_code = status.HTTP_200_OK
            response.data = {"success": True, "data": response.data}
            response.enveloped = True

            logger.debug(
                "Response wrapped in success envelope",
                extra={
                    "view": self.__class__.__name__,
                    "status_code": response.status_code,
                    "action": "response_enveloped",
                    "component": "EnvelopeResponseMixin",
                },
            )

        return super().finalize_response(request, response, *args, **kwargs)
