# gym_core/door_access/exceptions.py
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException


class StoreUnavailable(APIException):
    """
    Access log could not be read or written.
    Fatal for the current request; never retried here.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Door access log is temporarily unavailable."
    default_code = "store_unavailable"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
