"""
Response envelope shared by every endpoint.

Success::

    {"success": true, "data": ..., "timestamp": "2025-01-01T00:00:00Z"}

Failure (built by ``common.exceptions``)::

    {"success": false, "error": {"code": "...", "message": "..."}, "timestamp": "..."}
"""
from django.utils import timezone
from rest_framework import status as http_status
from rest_framework.response import Response


def iso_timestamp():
    return timezone.now().isoformat().replace('+00:00', 'Z')


def success_response(data=None, status=http_status.HTTP_200_OK, message=None):
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    body['timestamp'] = iso_timestamp()
    return Response(body, status=status)


def error_payload(code, message, details=None):
    error = {'code': code, 'message': message}
    if details:
        error['details'] = details
    return {
        'success': False,
        'error': error,
        'timestamp': iso_timestamp(),
    }


def error_response(code, message, status, details=None):
    return Response(error_payload(code, message, details), status=status)
