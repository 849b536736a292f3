"""
Result store.

A result can be recorded only for a paid detail whose order is not yet
Completed, and its three timestamps must satisfy
received_at <= performed_at <= delivered_at. Results are never deleted
through the API; cancelling delivered results reopens them for editing.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from django.db import transaction
from django.db.models import Q

from apps.core.exceptions import (
    AppValidationError,
    BadRequestError,
    BlockError,
    ConflictError,
    NotFoundError,
)
from apps.service_orders.models import ServiceOrder, ServiceOrderDetail, ServiceOrderStatus

from .models import Result, ResultDetail

logger = structlog.get_logger(__name__)

PERFORMED_BEFORE_RECEIVED = "Performed time cannot be earlier than received time."
DELIVERED_BEFORE_PERFORMED = "Delivered time cannot be earlier than performed time."

RESULT_FIELDS = (
    "received_at",
    "performed_at",
    "delivered_at",
    "result_text",
    "conclusion",
    "note",
    "url",
)


def validate_chronology(received_at, performed_at, delivered_at):
    if performed_at < received_at:
        raise BadRequestError(message=PERFORMED_BEFORE_RECEIVED, code="INVALID_CHRONOLOGY")
    if delivered_at < performed_at:
        raise BadRequestError(message=DELIVERED_BEFORE_PERFORMED, code="INVALID_CHRONOLOGY")


def _required_text(value, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise AppValidationError(
            message=f"{field.replace('_', ' ').capitalize()} is required",
            detail=f"{field}: This field may not be blank.",
        )
    return value


def _optional_text(value) -> Optional[str]:
    return (value or "").strip() or None


def _lock_detail_and_order(detail_id):
    try:
        detail = ServiceOrderDetail.objects.select_for_update().get(pk=detail_id)
    except ServiceOrderDetail.DoesNotExist:
        raise NotFoundError(
            message="Service order detail not found",
            detail=f"No service order detail with id {detail_id}.",
        )
    order = ServiceOrder.objects.select_for_update().get(pk=detail.order_id)
    return detail, order


def _ensure_order_open(order: ServiceOrder):
    if order.status == ServiceOrderStatus.COMPLETED:
        raise BlockError(
            message="This service order is completed. Results cannot be modified.",
            code="ORDER_COMPLETED",
        )


# ============================================================
# Results
# ============================================================
def get_result(result_id) -> Result:
    try:
        return Result.objects.select_related(
            "detail__service", "detail__order", "measurement"
        ).get(pk=result_id)
    except Result.DoesNotExist:
        raise NotFoundError(
            message="Result not found",
            detail=f"No result with id {result_id}.",
        )


def create_result(
    detail_id,
    *,
    received_at,
    performed_at,
    delivered_at,
    result_text,
    conclusion,
    note=None,
    url=None,
) -> Result:
    result_text = _required_text(result_text, "result_text")
    conclusion = _required_text(conclusion, "conclusion")

    with transaction.atomic():
        detail, order = _lock_detail_and_order(detail_id)

        if Result.objects.filter(detail_id=detail.id).exists():
            raise ConflictError(
                message="A result already exists for this service order detail.",
                code="DUPLICATE_RESULT",
            )

        validate_chronology(received_at, performed_at, delivered_at)

        if not detail.is_paid:
            raise BlockError(
                message="Results can only be recorded for paid services.",
                code="DETAIL_UNPAID",
            )
        _ensure_order_open(order)

        result = Result.objects.create(
            detail=detail,
            received_at=received_at,
            performed_at=performed_at,
            delivered_at=delivered_at,
            result_text=result_text,
            conclusion=conclusion,
            note=_optional_text(note),
            url=_optional_text(url),
        )

    logger.info(
        "result_created",
        result_id=result.id,
        detail_id=detail.id,
        service_order_id=order.id,
    )
    return result


def update_result(result_id, **changes) -> Result:
    """
    Partially update a result.

    Timestamps that are not supplied keep their stored value; the chronology
    check runs on the merged set.
    """
    unknown = set(changes) - set(RESULT_FIELDS)
    if unknown:
        raise AppValidationError(
            message="Unknown result fields",
            detail=[f"{name}: Unknown field." for name in sorted(unknown)],
        )
    if not changes:
        raise AppValidationError(message="No data to update")

    with transaction.atomic():
        try:
            result = Result.objects.select_for_update().get(pk=result_id)
        except Result.DoesNotExist:
            raise NotFoundError(
                message="Result not found",
                detail=f"No result with id {result_id}.",
            )
        order = ServiceOrder.objects.select_for_update().get(details__id=result.detail_id)
        _ensure_order_open(order)

        validate_chronology(
            changes.get("received_at") or result.received_at,
            changes.get("performed_at") or result.performed_at,
            changes.get("delivered_at") or result.delivered_at,
        )

        for name in ("received_at", "performed_at", "delivered_at"):
            if changes.get(name) is not None:
                setattr(result, name, changes[name])
        for name in ("result_text", "conclusion"):
            if name in changes:
                setattr(result, name, _required_text(changes[name], name))
        for name in ("note", "url"):
            if name in changes:
                setattr(result, name, _optional_text(changes[name]))

        result.save()

    logger.info("result_updated", result_id=result.id, fields=sorted(changes))
    return get_result(result.id)


# ============================================================
# Sub-results
# ============================================================
def create_result_detail(result_id, *, indicator, value, is_abnormal=False) -> ResultDetail:
    indicator = _required_text(indicator, "indicator")
    value = _required_text(value, "value")

    with transaction.atomic():
        result = get_result(result_id)
        order = ServiceOrder.objects.select_for_update().get(pk=result.detail.order_id)
        _ensure_order_open(order)

        if ResultDetail.objects.filter(result_id=result.id).exists():
            raise ConflictError(
                message="A result detail already exists for this result.",
                code="DUPLICATE_RESULT_DETAIL",
            )

        measurement = ResultDetail.objects.create(
            result=result,
            indicator=indicator,
            value=value,
            is_abnormal=bool(is_abnormal),
        )

    logger.info("result_detail_created", result_id=result.id, result_detail_id=measurement.id)
    return measurement


def update_result_detail(result_detail_id, **changes) -> ResultDetail:
    if not changes:
        raise AppValidationError(message="No data to update")

    with transaction.atomic():
        try:
            measurement = ResultDetail.objects.select_for_update().select_related(
                "result__detail"
            ).get(pk=result_detail_id)
        except ResultDetail.DoesNotExist:
            raise NotFoundError(
                message="Result detail not found",
                detail=f"No result detail with id {result_detail_id}.",
            )
        order = ServiceOrder.objects.select_for_update().get(pk=measurement.result.detail.order_id)
        _ensure_order_open(order)

        if "indicator" in changes:
            measurement.indicator = _required_text(changes["indicator"], "indicator")
        if "value" in changes:
            measurement.value = _required_text(changes["value"], "value")
        if "is_abnormal" in changes:
            measurement.is_abnormal = bool(changes["is_abnormal"])
        measurement.save()

    logger.info("result_detail_updated", result_detail_id=measurement.id)
    return measurement


# ============================================================
# Listing
# ============================================================
@dataclass
class ResultFilter:
    search: str = ""
    service_order_id: Optional[int] = None
    detail_id: Optional[int] = None
    medical_record_id: Optional[int] = None
    service_id: Optional[int] = None


def list_results(filters: ResultFilter = None):
    filters = filters or ResultFilter()
    queryset = Result.objects.select_related(
        "detail__service", "detail__order", "measurement"
    )

    if filters.detail_id is not None:
        queryset = queryset.filter(detail_id=filters.detail_id)
    if filters.service_order_id is not None:
        queryset = queryset.filter(detail__order_id=filters.service_order_id)
    if filters.service_id is not None:
        queryset = queryset.filter(detail__service_id=filters.service_id)
    if filters.medical_record_id is not None:
        queryset = queryset.filter(detail__order__medical_record_id=filters.medical_record_id)

    search = (filters.search or "").strip()
    if search:
        queryset = queryset.filter(
            Q(result_text__icontains=search)
            | Q(conclusion__icontains=search)
            | Q(detail__service__name__icontains=search)
            | Q(detail__order__code__icontains=search)
        )

    return queryset.order_by("-delivered_at", "-id")
