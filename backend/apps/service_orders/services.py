"""
Service order store.

All writes to service orders and their details go through these functions.
Each one runs in a single transaction and locks the rows it mutates, so the
workflow guards are evaluated against the state that is actually written.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.catalog.services import ServiceSnapshot, get_service
from apps.core.exceptions import (
    AppValidationError,
    BadRequestError,
    BlockError,
    ConflictError,
    NotFoundError,
)
from apps.core.sequences import create_with_code
from apps.records.models import medical_record_exists
from apps.staff.models import employee_exists

from . import workflow
from .models import ServiceOrder, ServiceOrderDetail, ServiceOrderStatus
from .transitions import apply_transition

logger = structlog.get_logger(__name__)

EXECUTING_MESSAGE = (
    "The service order has already been received or completed "
    "and cannot be updated or recalled."
)


@dataclass
class NewDetail:
    service_id: int
    quantity: int = 1
    require_result: Optional[bool] = None


# ============================================================
# Reads
# ============================================================
def get_order(order_id) -> ServiceOrder:
    try:
        return ServiceOrder.objects.select_related("medical_record", "ordered_by").get(pk=order_id)
    except ServiceOrder.DoesNotExist:
        raise NotFoundError(
            message="Service order not found",
            detail=f"No service order with id {order_id}.",
        )


def list_order_details(order_id):
    get_order(order_id)
    return (
        ServiceOrderDetail.objects.filter(order_id=order_id)
        .select_related(
            "service__group__service_type",
            "service__service_type",
            "service__execution_room",
            "invoice_line",
            "result",
        )
        .order_by("id")
    )


def _lock_order(order_id) -> ServiceOrder:
    try:
        return ServiceOrder.objects.select_for_update().get(pk=order_id)
    except ServiceOrder.DoesNotExist:
        raise NotFoundError(
            message="Service order not found",
            detail=f"No service order with id {order_id}.",
        )


def _lock_detail(detail_id) -> ServiceOrderDetail:
    try:
        return ServiceOrderDetail.objects.select_for_update().get(pk=detail_id)
    except ServiceOrderDetail.DoesNotExist:
        raise NotFoundError(
            message="Service order detail not found",
            detail=f"No service order detail with id {detail_id}.",
        )


def _validate_quantity(quantity) -> int:
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise AppValidationError(
            message="Quantity must be a whole number",
            detail=f"quantity: {quantity!r} is not a valid integer.",
        )
    if quantity < 1:
        raise AppValidationError(
            message="Quantity must be at least 1",
            detail="quantity: Ensure this value is greater than or equal to 1.",
        )
    return quantity


def _as_id(value, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise AppValidationError(
            message=f"{field} must be an integer",
            detail=f"{field}: {value!r} is not a valid id.",
        )


def _ensure_editable(order: ServiceOrder):
    if workflow.is_executing(order):
        raise BlockError(message=EXECUTING_MESSAGE, code="ORDER_EXECUTING")


def _build_detail(order, snapshot: ServiceSnapshot, quantity, require_result) -> ServiceOrderDetail:
    if require_result is None:
        require_result = snapshot.requires_result
    return ServiceOrderDetail(
        order=order,
        service_id=snapshot.id,
        quantity=quantity,
        unit_price=snapshot.unit_price,
        amount=snapshot.unit_price * quantity,
        require_result=require_result,
    )


# ============================================================
# Orders
# ============================================================
def create_order(
    *,
    medical_record_id,
    ordered_by_id=None,
    status=ServiceOrderStatus.NOT_SENT,
    created_at: datetime = None,
    code: str = None,
    details: Iterable[NewDetail] = (),
) -> ServiceOrder:
    """
    Create a service order, optionally with its details, in one transaction.

    The order starts as NOT_SENT, or PENDING when it is sent right away (which
    needs at least one detail). A code is generated (PCD000001, ...) unless
    one is supplied.
    """
    details = list(details)

    if status not in (ServiceOrderStatus.NOT_SENT, ServiceOrderStatus.PENDING):
        raise BlockError(
            message="A new service order must start as Not sent or Pending.",
            code="INVALID_INITIAL_STATUS",
        )
    if status == ServiceOrderStatus.PENDING and not details:
        raise BlockError(
            message="Add at least one service before sending the service order.",
            code="ORDER_HAS_NO_DETAILS",
        )
    if not medical_record_exists(medical_record_id):
        raise BadRequestError(
            message="Medical record does not exist",
            code="MEDICAL_RECORD_NOT_FOUND",
        )
    if ordered_by_id is not None and not employee_exists(ordered_by_id):
        raise BadRequestError(
            message="Ordering employee does not exist",
            code="EMPLOYEE_NOT_FOUND",
        )

    quantities = [_validate_quantity(item.quantity) for item in details]
    snapshots = [get_service(_as_id(item.service_id, "service_id")) for item in details]

    fields = {
        "medical_record_id": medical_record_id,
        "ordered_by_id": ordered_by_id,
        "status": status,
        "created_at": created_at or timezone.now(),
    }

    with transaction.atomic():
        if code:
            order = _create_with_explicit_code(code.strip().upper(), fields)
        else:
            order = create_with_code(
                ServiceOrder,
                "code",
                settings.CLINIC["SERVICE_ORDER_CODE_PREFIX"],
                **fields,
            )

        ServiceOrderDetail.objects.bulk_create([
            _build_detail(order, snapshot, quantity, item.require_result)
            for item, quantity, snapshot in zip(details, quantities, snapshots)
        ])

    logger.info(
        "service_order_created",
        service_order_id=order.id,
        service_order_code=order.code,
        medical_record_id=medical_record_id,
        status=order.status,
        detail_count=len(details),
    )
    return order


def _create_with_explicit_code(code, fields) -> ServiceOrder:
    if ServiceOrder.objects.filter(code=code).exists():
        raise ConflictError(
            message=f"Service order code {code} already exists",
            code="DUPLICATE_CODE",
        )
    try:
        with transaction.atomic():
            return ServiceOrder.objects.create(code=code, **fields)
    except IntegrityError:
        raise ConflictError(
            message=f"Service order code {code} already exists",
            code="DUPLICATE_CODE",
        )


def update_status(order_id, target) -> ServiceOrder:
    try:
        target = ServiceOrderStatus(int(target))
    except (TypeError, ValueError):
        raise AppValidationError(
            message="Invalid status",
            detail=f"status: {target!r} is not a valid service order status.",
        )

    with transaction.atomic():
        order = _lock_order(order_id)
        apply_transition(order, target)

    return get_order(order_id)


def delete_order(order_id):
    with transaction.atomic():
        order = _lock_order(order_id)
        if not workflow.can_delete_service_order(order.status):
            raise BlockError(message=EXECUTING_MESSAGE, code="ORDER_EXECUTING")
        if order.details.filter(is_paid=True).exists():
            raise BlockError(
                message="This service order has paid services. Cancel the invoice first.",
                code="ORDER_HAS_PAID_SERVICES",
            )
        code = order.code
        order.delete()

    logger.info("service_order_deleted", service_order_id=order_id, service_order_code=code)


# ============================================================
# Details
# ============================================================
def add_detail(order_id, service_id, quantity=1, require_result=None) -> ServiceOrderDetail:
    quantity = _validate_quantity(quantity)
    snapshot = get_service(_as_id(service_id, "service_id"))

    with transaction.atomic():
        order = _lock_order(order_id)
        _ensure_editable(order)
        detail = _build_detail(order, snapshot, quantity, require_result)
        detail.save()

    logger.info(
        "service_order_detail_added",
        service_order_id=order.id,
        detail_id=detail.id,
        service_id=snapshot.id,
        quantity=detail.quantity,
    )
    return detail


def update_detail(detail_id, *, quantity=None, service_id=None, require_result=None) -> ServiceOrderDetail:
    if quantity is None and service_id is None and require_result is None:
        raise AppValidationError(message="No data to update")
    if quantity is not None:
        quantity = _validate_quantity(quantity)
    if service_id is not None:
        service_id = _as_id(service_id, "service_id")

    with transaction.atomic():
        detail = _lock_detail(detail_id)
        order = _lock_order(detail.order_id)
        _ensure_editable(order)
        if detail.is_paid:
            raise BlockError(
                message="Paid services cannot be changed. Cancel the invoice first.",
                code="DETAIL_ALREADY_PAID",
            )

        if service_id is not None and service_id != detail.service_id:
            snapshot = get_service(service_id)
            detail.service_id = snapshot.id
            detail.unit_price = snapshot.unit_price
            if require_result is None:
                detail.require_result = snapshot.requires_result
        if quantity is not None:
            detail.quantity = quantity
        if require_result is not None:
            detail.require_result = require_result

        detail.amount = detail.unit_price * detail.quantity
        detail.save()

    logger.info(
        "service_order_detail_updated",
        service_order_id=detail.order_id,
        detail_id=detail.id,
        quantity=detail.quantity,
    )
    return detail


def delete_detail(detail_id):
    with transaction.atomic():
        detail = _lock_detail(detail_id)
        order = _lock_order(detail.order_id)
        _ensure_editable(order)
        if detail.is_paid:
            raise BlockError(
                message="Paid services cannot be removed. Cancel the invoice first.",
                code="DETAIL_ALREADY_PAID",
            )
        detail.delete()

    logger.info("service_order_detail_deleted", service_order_id=order.id, detail_id=detail_id)
