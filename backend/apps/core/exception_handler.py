"""
Unified exception handler
=========================
Registered in REST_FRAMEWORK['EXCEPTION_HANDLER'].

Flow:
1. a service function raises
2. the view does not catch it
3. DRF hands the exception to this handler
4. the handler returns the unified JSON shape
"""
import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import BaseAppException

logger = structlog.get_logger(__name__)


def _flatten(data):
    """Turn DRF error payloads ({field: [msg]}, [msg] or str) into a flat list."""
    detail = []
    if isinstance(data, dict):
        for field, messages in data.items():
            if isinstance(messages, (list, tuple)):
                for msg in messages:
                    if isinstance(msg, dict):
                        detail.extend(f"{field}.{line}" for line in _flatten(msg))
                    else:
                        detail.append(f"{field}: {msg}")
            elif isinstance(messages, dict):
                detail.extend(f"{field}.{line}" for line in _flatten(messages))
            else:
                detail.append(f"{field}: {messages}")
    elif isinstance(data, (list, tuple)):
        detail = [str(item) for item in data]
    elif data is not None:
        detail = [str(data)]
    return detail


def unified_exception_handler(exc, context):
    request = context.get("request")
    view = context.get("view")
    log_context = {
        "path": request.path if request else "unknown",
        "method": request.method if request else "unknown",
        "view": view.__class__.__name__ if view else "unknown",
    }

    # ────────────────────────────────────────────
    # Case 1: our own exceptions
    # ────────────────────────────────────────────
    if isinstance(exc, BaseAppException):
        logger.info("app_exception", code=exc.code, http_status=exc.http_status, **log_context)
        return Response(exc.to_dict(), status=exc.http_status)

    # ────────────────────────────────────────────
    # Case 2: Django model validation (full_clean)
    # ────────────────────────────────────────────
    if isinstance(exc, DjangoValidationError):
        logger.warning("model_validation_failed", **log_context)
        if hasattr(exc, "message_dict"):
            detail = _flatten(exc.message_dict)
        else:
            detail = list(exc.messages)
        return Response(
            {
                "type": "error",
                "code": "VALIDATION_ERROR",
                "message": "Input validation failed",
                "detail": detail,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    # ────────────────────────────────────────────
    # Case 3: exceptions DRF knows (serializer errors, 404, 405, ...)
    # ────────────────────────────────────────────
    response = drf_exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, Http404) or response.status_code == status.HTTP_404_NOT_FOUND:
            code, message = "NOT_FOUND", "Resource not found"
        elif response.status_code == status.HTTP_400_BAD_REQUEST:
            code, message = "VALIDATION_ERROR", "Input validation failed"
        else:
            code = getattr(exc, "default_code", "ERROR").upper()
            message = str(getattr(exc, "detail", "An error occurred"))

        logger.warning("api_exception", exception=exc.__class__.__name__, **log_context)
        return Response(
            {
                "type": "error",
                "code": code,
                "message": message,
                "detail": _flatten(response.data),
            },
            status=response.status_code,
        )

    # ────────────────────────────────────────────
    # Case 4: unexpected failure; never leak internals
    # ────────────────────────────────────────────
    logger.exception("unexpected_error", **log_context)
    return Response(
        {
            "type": "error",
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "detail": [],
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
