"""
Custom Exception Handler for API
"""
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from django.utils import timezone
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import ErrorCode, StorefrontException

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases
DRF_ERROR_CODES = [
    (exceptions.NotAuthenticated, ErrorCode.AUTH_REQUIRED),
    (exceptions.AuthenticationFailed, ErrorCode.AUTH_REQUIRED),
    (exceptions.PermissionDenied, ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS),
    (DjangoPermissionDenied, ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS),
    (exceptions.Throttled, ErrorCode.RATE_LIMIT_EXCEEDED),
    (exceptions.ParseError, ErrorCode.MALFORMED_JSON),
    (exceptions.ValidationError, ErrorCode.VALIDATION_FAILED),
    (exceptions.NotFound, ErrorCode.NOT_FOUND),
    (Http404, ErrorCode.NOT_FOUND),
]

GENERIC_SERVER_MESSAGE = "An unexpected error occurred. Please try again"


def build_error_body(code, message, details=None, path=None, status_code=400):
    """
    Standard error envelope. Details of 5xx errors are only exposed in DEBUG.
    """
    error = {
        "code": code.value if isinstance(code, ErrorCode) else str(code),
        "message": message,
        "timestamp": timezone.now().isoformat(),
    }
    if details and (settings.DEBUG or status_code < 500):
        error["details"] = details
    if path:
        error["path"] = path
    return {"error": error}


def _request_path(context):
    request = context.get("request") if context else None
    return getattr(request, "path", None)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error responses.
    """
    path = _request_path(context)

    if isinstance(exc, StorefrontException):
        if exc.status_code >= 500:
            logger.error(f"Storefront error at {path}: {exc.message}", exc_info=exc)
        else:
            logger.info(f"Rejected request at {path}: {exc.code.value} {exc.message}")
        return Response(
            build_error_body(exc.code, exc.message, exc.details, path, exc.status_code),
            status=exc.status_code
        )

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        code = ErrorCode.BAD_REQUEST
        for exc_class, mapped in DRF_ERROR_CODES:
            if isinstance(exc, exc_class):
                code = mapped
                break

        if isinstance(exc, exceptions.ValidationError):
            message = "The request contains invalid data"
            details = response.data if isinstance(response.data, dict) else {"detail": response.data}
        else:
            message = str(getattr(exc, "detail", exc))
            details = None

        response.data = build_error_body(code, message, details, path, response.status_code)
        return response

    # Handle unexpected exceptions
    logger.error(f"Unhandled exception at {path}: {exc}", exc_info=exc)
    return Response(
        build_error_body(
            ErrorCode.SERVER_ERROR,
            GENERIC_SERVER_MESSAGE,
            {"exception": str(exc)},
            path,
            status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
