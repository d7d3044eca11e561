# finance/tests/unit/test_exception_handler.py
import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (APIException, NotAuthenticated,
                                       PermissionDenied, ValidationError)

from core.exceptions import (GENERIC_ERROR_MESSAGE, envelope_exception_handler,
                             flatten_error_detail)

CONTEXT = {"view": None, "request": None}


class TestFlattenErrorDetail:
    @pytest.mark.parametrize(
        "detail, expected",
        [
            ("Plain message", "Plain message"),
            (["First", "Second"], "First"),
            ({"detail": "Not found."}, "Not found."),
            ({"non_field_errors": ["Boxes must differ"]}, "Boxes must differ"),
            ({"amount": ["A valid amount is required."]}, "amount: A valid amount is required."),
            ({"transactions": [{"date": ["Invalid"]}]}, "transactions: date: Invalid"),
            ({}, ""),
            ([], ""),
        ],
    )
    def test_flatten(self, detail, expected):
        assert flatten_error_detail(detail) == expected


class TestEnvelopeExceptionHandler:
    def test_validation_error(self):
        response = envelope_exception_handler(
            ValidationError({"name": ["This field is required."]}), CONTEXT
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"success": False, "error": "name: This field is required."}

    def test_django_validation_error_becomes_400(self):
        response = envelope_exception_handler(
            DjangoValidationError("Insufficient balance in account"), CONTEXT
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"] == "Insufficient balance in account"

    def test_http404_uses_fixed_message(self):
        response = envelope_exception_handler(
            Http404("No Account matches the given query."), CONTEXT
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {"success": False, "error": "Not found."}

    @pytest.mark.parametrize(
        "exc, code",
        [
            (NotAuthenticated(), status.HTTP_401_UNAUTHORIZED),
            (PermissionDenied(), status.HTTP_403_FORBIDDEN),
        ],
    )
    def test_auth_errors(self, exc, code):
        response = envelope_exception_handler(exc, CONTEXT)
        assert response.status_code == code
        assert response.data["success"] is False
        assert response.data["error"] == str(exc.detail)

    def test_unknown_exception_is_generic_500(self):
        response = envelope_exception_handler(RuntimeError("db password is hunter2"), CONTEXT)
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {"success": False, "error": GENERIC_ERROR_MESSAGE}

    def test_api_exception_500_hides_detail(self):
        response = envelope_exception_handler(
            APIException("Service operation failed"), CONTEXT
        )
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data["error"] == GENERIC_ERROR_MESSAGE
