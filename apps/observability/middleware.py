from __future__ import annotations

import logging
import time
import uuid

logger = logging.getLogger("freshcounty.request")

REQUEST_ID_HEADER = "HTTP_X_REQUEST_ID"


class RequestIdMiddleware:
    """Tag every request with an id and report how long the response took."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = (request.META.get(REQUEST_ID_HEADER) or "").strip()[:64] or str(uuid.uuid4())
        request.request_id = request_id
        started = time.monotonic()

        response = self.get_response(request)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        response["X-Request-Id"] = request_id
        response["X-Response-Time-ms"] = str(elapsed_ms)
        if response.status_code >= 500:
            logger.error(
                "request failed method=%s path=%s status=%s request_id=%s duration_ms=%s",
                request.method,
                request.path,
                response.status_code,
                request_id,
                elapsed_ms,
            )
        else:
            logger.debug(
                "request method=%s path=%s status=%s request_id=%s duration_ms=%s",
                request.method,
                request.path,
                response.status_code,
                request_id,
                elapsed_ms,
            )
        return response
