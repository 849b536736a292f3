"""
Liveness endpoint.
"""

import structlog
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = structlog.get_logger(__name__)


def health_check(request):
    """GET /health/ → 200 when the database answers, 503 otherwise."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        logger.error("health_check_failed", error=str(exc), error_type=type(exc).__name__)
        return JsonResponse({"status": "unhealthy", "database": "unavailable"}, status=503)
    return JsonResponse({"status": "healthy", "database": "ok"})
