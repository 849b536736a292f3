"""
Unified exception hierarchy
===========================
Every business error raised by the service layer derives from BaseAppException.
The DRF exception handler only knows this base class and turns it into a JSON
response, so views never need try/except around service calls.

Rules:
- the service layer raises the matching exception as soon as a guard fails,
  before any row is written
- views do not catch these exceptions
- front-desk staff read ``message`` directly, so it must say what to do
"""


# ============================================================
# Base class
# ============================================================
class BaseAppException(Exception):
    """
    Base class of all domain exceptions.

    Response shape:
    {
        "type": "error",
        "code": "SERVICE_ORDER_UNPAID",   # machine readable
        "message": "human readable summary",
        "detail": ["extra line 1", "extra line 2"]
    }
    """
    type = "error"
    code = "UNKNOWN_ERROR"
    http_status = 500
    message = "An unexpected error occurred"

    def __init__(self, message=None, detail=None, code=None):
        if message:
            self.message = message
        if code:
            self.code = code

        if detail is None:
            self.detail = []
        elif isinstance(detail, str):
            self.detail = [detail]
        else:
            self.detail = list(detail)

        super().__init__(self.message)

    def to_dict(self):
        return {
            "type": self.type,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }


# ============================================================
# Malformed input
# ============================================================
class AppValidationError(BaseAppException):
    """
    Input shape or range is wrong (empty id list, negative amount, ...).

    Named AppValidationError so it does not clash with
    rest_framework.exceptions.ValidationError.
    """
    code = "VALIDATION_ERROR"
    http_status = 400
    message = "Input validation failed"


class BadRequestError(BaseAppException):
    """
    Input is well formed but inconsistent with stored data.
    e.g. a detail belonging to another medical record, received amount lower
    than the total, result timestamps out of order.
    """
    code = "BAD_REQUEST"
    http_status = 400
    message = "The request cannot be processed"


# ============================================================
# Missing rows
# ============================================================
class NotFoundError(BaseAppException):
    code = "NOT_FOUND"
    http_status = 404
    message = "Resource not found"


# ============================================================
# Business rules
# ============================================================
class BlockError(BaseAppException):
    """
    A state-machine guard refused the operation.
    e.g. receiving an order that still has unpaid services.

    The caller has to change the underlying state first; retrying the same
    request will fail the same way.
    """
    code = "BUSINESS_BLOCK"
    http_status = 409
    message = "Operation blocked by business rules"


class ConflictError(BaseAppException):
    """
    Someone else already changed the rows this request depends on.
    e.g. a service detail paid by another cashier, a result already saved.

    The caller must re-read before retrying.
    """
    code = "CONFLICT"
    http_status = 409
    message = "The resource was modified by another request"
