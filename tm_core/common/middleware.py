# tm_core/common/middleware.py

from __future__ import annotations

import re

from django.utils.deprecation import MiddlewareMixin

from tm_core.common.api.exceptions import ensure_request_id

REQUEST_ID_HEADER = "X-Request-Id"
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9\-_.]{8,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (accepting a well-formed inbound X-Request-Id)
    and echoes it on the response so clients can quote it next to error envelopes.
    """

    def process_request(self, request):
        inbound = request.META.get("HTTP_X_REQUEST_ID", "")
        if inbound and _SAFE_REQUEST_ID.match(inbound):
            request.request_id = inbound
        ensure_request_id(request)
        return None

    def process_response(self, request, response):
        response[REQUEST_ID_HEADER] = ensure_request_id(request)
        return response
