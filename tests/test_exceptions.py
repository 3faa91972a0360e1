"""Tests for the API error envelope."""

from rest_framework import exceptions

from api.exceptions import custom_exception_handler
from apps.core.exceptions import (
    ErrorCode,
    InsufficientStockException,
    OrderCannotBeCancelledException,
    StorefrontException,
)


class FakeRequest:
    path = "/api/orders/"


CONTEXT = {"request": FakeRequest()}


class TestStorefrontErrors:
    def test_domain_error_envelope(self):
        exc = InsufficientStockException(product_name="Keyboard", requested=3, available=1)

        response = custom_exception_handler(exc, CONTEXT)

        assert response.status_code == 400
        error = response.data["error"]
        assert error["code"] == "PRODUCT_INSUFFICIENT_STOCK"
        assert error["message"] == "Insufficient stock"
        assert error["details"] == {"productName": "Keyboard", "requested": 3, "available": 1}
        assert error["path"] == "/api/orders/"

    def test_cancel_error_names_status(self):
        response = custom_exception_handler(OrderCannotBeCancelledException("shipped"), CONTEXT)

        assert response.status_code == 422
        assert response.data["error"]["message"] == "Order cannot be cancelled. Current status: shipped"

    def test_server_error_details_hidden(self, settings):
        settings.DEBUG = False
        exc = StorefrontException("db exploded", ErrorCode.SERVER_ERROR, details={"dsn": "secret"})

        response = custom_exception_handler(exc, CONTEXT)

        assert response.status_code == 500
        assert "details" not in response.data["error"]


class TestFrameworkErrors:
    def test_validation_error(self):
        exc = exceptions.ValidationError({"customerEmail": ["This field is required."]})

        response = custom_exception_handler(exc, CONTEXT)

        error = response.data["error"]
        assert response.status_code == 400
        assert error["code"] == "VALIDATION_FAILED"
        assert error["message"] == "The request contains invalid data"
        assert "customerEmail" in error["details"]

    def test_throttled(self):
        response = custom_exception_handler(exceptions.Throttled(wait=30), CONTEXT)

        assert response.status_code == 429
        assert response.data["error"]["code"] == "RATE_LIMIT_EXCEEDED"

    def test_not_authenticated(self):
        response = custom_exception_handler(exceptions.NotAuthenticated(), CONTEXT)

        assert response.status_code == 401
        assert response.data["error"]["code"] == "AUTH_REQUIRED"


class TestUnexpectedErrors:
    def test_generic_message(self, settings):
        settings.DEBUG = False

        response = custom_exception_handler(RuntimeError("connection string leaked"), CONTEXT)

        error = response.data["error"]
        assert response.status_code == 500
        assert error["code"] == "SERVER_ERROR"
        assert error["message"] == "An unexpected error occurred. Please try again"
        assert "details" not in error
