from __future__ import annotations

import logging
import re

from django.utils.deprecation import MiddlewareMixin

from gym_core.common.api.exceptions import REQUEST_ID_HEADER, ensure_request_id

logger = logging.getLogger("gym.request")

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id and echoes it as X-Request-Id.

    Behavior:
      - An incoming X-Request-Id is reused when it looks sane (<= 64 chars of [A-Za-z0-9._-]).
      - Otherwise a fresh uuid4 hex is generated.
      - Error envelopes built later in the request reuse the same id.
    """

    META_KEY = "HTTP_X_REQUEST_ID"

    def process_request(self, request):
        incoming = request.META.get(self.META_KEY)
        if incoming and _VALID_REQUEST_ID.match(incoming):
            request.request_id = incoming
        else:
            request.request_id = None
        ensure_request_id(request)
        return None

    def process_response(self, request, response):
        rid = ensure_request_id(request)
        response[REQUEST_ID_HEADER] = rid
        if response.status_code >= 500:
            logger.error("%s %s -> %s (request_id=%s)", request.method, request.path, response.status_code, rid)
        return response
