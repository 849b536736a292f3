"""
Request logging middleware.
"""

import time
import uuid

import structlog

logger = structlog.get_logger("request")

QUIET_PATHS = {"/health/", "/metrics", "/metrics/"}


class RequestLoggingMiddleware:
    """
    Log every HTTP request as one structured event.

    Each request gets a short request id which is bound into the structlog
    context (so service-layer events carry it too) and echoed back in the
    X-Request-ID header.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())[:8]
        request.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.time()

        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            client_ip = x_forwarded_for.split(",")[0].strip()
        else:
            client_ip = request.META.get("REMOTE_ADDR", "unknown")

        response = self.get_response(request)

        duration_ms = round((time.time() - start_time) * 1000, 2)

        status_code = response.status_code
        if status_code >= 500:
            log_func = logger.error
            status_category = "server_error"
        elif status_code >= 400:
            log_func = logger.warning
            status_category = "client_error"
        else:
            log_func = logger.info
            status_category = "success"

        if request.path not in QUIET_PATHS:
            log_func(
                "http_request",
                method=request.method,
                path=request.path,
                status_code=status_code,
                status_category=status_category,
                duration_ms=duration_ms,
                client_ip=client_ip,
                user_agent=request.META.get("HTTP_USER_AGENT", "")[:100],
                query_params=request.META.get("QUERY_STRING", "")[:200] or None,
            )

        response["X-Request-ID"] = request_id
        return response
