"""
Human readable code sequences (PCD000001, HD000042, ...).

The counter is derived from existing rows, so two requests can compute the
same next code. The generated code is only a candidate: the row is inserted
inside a savepoint and, when the unique constraint on the code column fires,
the next candidate is tried.
"""

import re

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import BigIntegerField, Max
from django.db.models.functions import Cast, Substr

from .exceptions import ConflictError

logger = structlog.get_logger(__name__)


def format_code(prefix: str, sequence: int, pad: int = None) -> str:
    if pad is None:
        pad = settings.CLINIC["CODE_PAD"]
    return f"{prefix}{str(sequence).zfill(pad)}"


def highest_sequence(model, field: str, prefix: str) -> int:
    """Largest numeric suffix among codes made of ``prefix`` + digits, 0 if none."""
    suffix = Cast(Substr(field, len(prefix) + 1), BigIntegerField())
    latest = model.objects.filter(
        **{f"{field}__regex": rf"^{re.escape(prefix)}[0-9]+$"}
    ).aggregate(highest=Max(suffix))["highest"]
    return int(latest or 0)


def next_code(model, field: str, prefix: str, pad: int = None) -> str:
    """Next free code: highest suffix + 1, probing forward past taken codes."""
    sequence = highest_sequence(model, field, prefix) + 1
    while True:
        candidate = format_code(prefix, sequence, pad)
        if not model.objects.filter(**{field: candidate}).exists():
            return candidate
        sequence += 1


def create_with_code(model, field: str, prefix: str, **fields):
    """
    Insert ``model(**fields)`` with a freshly generated code.

    Retries on a unique violation of the code column, up to
    CLINIC['CODE_MAX_ATTEMPTS'] times. Any other IntegrityError propagates.
    """
    max_attempts = settings.CLINIC["CODE_MAX_ATTEMPTS"]

    for attempt in range(1, max_attempts + 1):
        candidate = next_code(model, field, prefix)
        try:
            with transaction.atomic():
                return model.objects.create(**{field: candidate}, **fields)
        except IntegrityError:
            if not model.objects.filter(**{field: candidate}).exists():
                raise
            logger.warning(
                "code_collision_retry",
                model=model.__name__,
                code=candidate,
                attempt=attempt,
            )

    raise ConflictError(
        message="Could not reserve a unique code, please retry",
        detail=f"{model.__name__} code generation gave up after {max_attempts} attempts",
        code="CODE_SEQUENCE_EXHAUSTED",
    )
