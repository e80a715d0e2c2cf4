"""
Custom exception handler for Django REST Framework.
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    Throttled,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

from common.responses import error_payload

logger = logging.getLogger(__name__)


class DomainError(APIException):
    """
    Base class for business-rule violations raised by service modules.

    ``reason`` is a machine-readable discriminator surfaced in
    ``error.details.reason`` so clients can tell the conditions apart while
    the public ``code`` stays within the documented set.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'VALIDATION_ERROR'
    default_detail = 'The request violates a business rule.'
    reason = 'domain_error'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent JSON error responses.

    Response format:
    {
        "success": false,
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Human-readable message",
            "details": { ... }  // optional
        },
        "timestamp": "2025-01-01T00:00:00Z"
    }
    """
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.message_dict if hasattr(exc, 'message_dict') else exc.messages)

    response = exception_handler(exc, context)

    if response is None:
        if isinstance(exc, DatabaseError):
            logger.error(
                'Database error in %s: %s',
                context.get('view', 'unknown view'),
                exc,
            )
            return Response(
                error_payload('DATABASE_ERROR', str(exc)),
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        logger.exception(
            'Unhandled exception in %s',
            context.get('view', 'unknown view'),
            exc_info=exc,
        )
        return Response(
            error_payload('INTERNAL_ERROR', 'Internal server error'),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code, message, details = _format_error(exc, response)
    if code == 'UNAUTHORIZED':
        response.status_code = status.HTTP_401_UNAUTHORIZED

    response.data = error_payload(code, message, details)
    return response


def _format_error(exc, response):
    """Return ``(code, message, details)`` for a handled exception."""
    if isinstance(exc, DomainError):
        return exc.default_code, str(exc.detail), {'reason': exc.reason}

    if isinstance(exc, DRFValidationError):
        return 'VALIDATION_ERROR', _first_message(response.data), response.data

    if isinstance(exc, ParseError):
        return 'VALIDATION_ERROR', str(exc.detail), None

    if isinstance(exc, NotAuthenticated):
        return 'UNAUTHORIZED', 'Authentication required', None

    if isinstance(exc, AuthenticationFailed):
        detail = exc.detail
        # simplejwt wraps token errors in a dict with a nested 'detail'
        if isinstance(detail, dict):
            detail = detail.get('detail', 'Authentication required')
        return 'UNAUTHORIZED', str(detail), None

    if isinstance(exc, (PermissionDenied, DjangoPermissionDenied)):
        detail = getattr(exc, 'detail', None)
        return 'FORBIDDEN', str(detail) if detail else 'Access denied', None

    if isinstance(exc, (NotFound, Http404)):
        detail = getattr(exc, 'detail', None)
        message = str(detail) if detail and str(detail) != NotFound.default_detail else 'Resource not found'
        return 'NOT_FOUND', message, None

    if isinstance(exc, Throttled):
        return 'RATE_LIMITED', str(exc.detail), None

    if isinstance(exc, APIException):
        code = exc.default_code if hasattr(exc, 'default_code') else 'error'
        return str(code).upper(), str(exc.detail), None

    return 'INTERNAL_ERROR', 'Internal server error', None


def _first_message(data):
    """Pull the first human-readable message out of a DRF error structure."""
    if isinstance(data, dict):
        for field, value in data.items():
            message = _first_message(value)
            if message:
                if field in ('non_field_errors', 'detail'):
                    return message
                return f'{field}: {message}'
        return 'Invalid input.'
    if isinstance(data, (list, tuple)):
        for item in data:
            message = _first_message(item)
            if message:
                return message
        return 'Invalid input.'
    return str(data)
