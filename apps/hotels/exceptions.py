"""
Errors raised while talking to the hotel provider.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class UpstreamError(APIException):
    """
    The hotel provider failed or rejected the request.

    Client errors from the provider keep their status code; anything else is
    reported as 502.
    """
    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = 'UPSTREAM_ERROR'
    default_detail = 'The hotel provider could not be reached.'

    def __init__(self, detail=None, status_code=None):
        super().__init__(detail)
        if status_code is not None:
            self.status_code = status_code
