"""
Service exception handler mixin.
Translates service-layer exceptions into DRF exceptions with structured
logging, so views stay thin and every failure reaches the envelope handler
with the right HTTP status.
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework.exceptions import APIException, NotFound
from rest_framework.exceptions import PermissionDenied as DRFPermissionDenied
from rest_framework.exceptions import ValidationError as DRFValidationError

logger = logging.getLogger(__name__)


class ServiceExceptionHandlerMixin:
    """
    Mixin for handling service layer exceptions in views.

    Mapping:
    - Django/DRF ValidationError -> DRF ValidationError (400)
    - Http404 / ObjectDoesNotExist -> NotFound (404)
    - PermissionError / DRF PermissionDenied -> PermissionDenied (403)
    - other APIException -> re-raised unchanged
    - anything else -> generic APIException (500), details only in the log

    Usage:
        movement = self.handle_service_call(
            SavingsTransactionService.deposit, request.user, box_id, amount
        )
    """

    def _service_context(self, service_call):
        owner = getattr(service_call, "__self__", None)
        if isinstance(owner, type):
            service_name = owner.__name__
        elif owner is not None:
            service_name = owner.__class__.__name__
        else:
            service_name = getattr(service_call, "__qualname__", "").split(".")[0] or None
        # Views carry the request directly, serializers through their context
        request = getattr(self, "request", None) or getattr(self, "context", {}).get(
            "request"
        )
        return {
            "service_name": service_name,
            "method_name": getattr(service_call, "__name__", str(service_call)),
            "user_id": getattr(getattr(request, "user", None), "id", None),
            "component": "ServiceExceptionHandlerMixin",
        }

    def handle_service_call(self, service_call, *args, **kwargs):
        """
        Execute service call with exception translation and logging.

        Args:
            service_call: Service method to execute
            *args: Positional arguments for service call
            **kwargs: Keyword arguments for service call

        Returns:
            Any: Result from service call

        Raises:
            DRFValidationError: For validation and domain rule violations
            NotFound: For missing or foreign rows
            DRFPermissionDenied: For authorization failures
            APIException: For unexpected service errors
        """
        context = self._service_context(service_call)

        logger.debug(
            "Service call execution initiated",
            extra={
                **context,
                "args_count": len(args),
                "kwargs_keys": list(kwargs.keys()),
                "action": "service_call_start",
            },
        )

        try:
            result = service_call(*args, **kwargs)

        except DRFValidationError as e:
            logger.warning(
                "Service validation error (DRF)",
                extra={
                    **context,
                    "error_type": "DRFValidationError",
                    "error_detail": e.detail,
                    "action": "service_validation_error_drf",
                    "severity": "medium",
                },
            )
            raise

        except DjangoValidationError as e:
            error_messages = e.messages if hasattr(e, "messages") else [str(e)]
            logger.warning(
                "Service validation error (Django)",
                extra={
                    **context,
                    "error_type": "DjangoValidationError",
                    "error_messages": error_messages,
                    "action": "service_validation_error_django",
                    "severity": "medium",
                },
            )
            if hasattr(e, "error_dict"):
                raise DRFValidationError(e.message_dict)
            raise DRFValidationError(error_messages)

        except (Http404, ObjectDoesNotExist) as e:
            logger.info(
                "Service lookup found nothing",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "action": "service_not_found",
                },
            )
            # Missing and foreign rows are indistinguishable to the client
            raise NotFound()

        except DRFPermissionDenied as e:
            logger.warning(
                "Service permission denied (DRF)",
                extra={
                    **context,
                    "error_type": "DRFPermissionDenied",
                    "error_detail": e.detail,
                    "action": "service_permission_denied_drf",
                    "severity": "high",
                },
            )
            raise

        except PermissionError as e:
            logger.warning(
                "Service permission denied (Python)",
                extra={
                    **context,
                    "error_type": "PermissionError",
                    "error_message": str(e),
                    "action": "service_permission_denied_python",
                    "severity": "high",
                },
            )
            raise DRFPermissionDenied(str(e))

        except APIException as e:
            logger.error(
                "Service API exception",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "error_detail": e.detail,
                    "status_code": e.status_code,
                    "action": "service_api_exception",
                    "severity": "high",
                },
            )
            raise

        except Exception as e:
            logger.error(
                "Service operation failed unexpectedly",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "args_count": len(args),
                    "kwargs_keys": list(kwargs.keys()),
                    "action": "service_unexpected_error",
                    "severity": "critical",
                },
                exc_info=True,
            )
            # Generic exception so internals never reach the client
            raise APIException(detail="Service operation failed", code="service_error")

        logger.debug(
            "Service call completed successfully",
            extra={
                **context,
                "result_type": type(result).__name__,
                "action": "service_call_success",
            },
        )
        return result
