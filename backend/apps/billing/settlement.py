"""
Settlement engine
=================
Pays a set of service order details with one invoice, and cancels invoices.

settle() and cancel() each run in a single transaction. Detail rows are locked
before order rows, in primary key order, so two concurrent settlements over
overlapping details serialize instead of both paying the same line. When a
guard fails nothing is written.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, List

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    AppValidationError,
    BadRequestError,
    BlockError,
    ConflictError,
    NotFoundError,
)
from apps.core.sequences import create_with_code
from apps.records.models import medical_record_exists
from apps.service_orders.models import ServiceOrder, ServiceOrderDetail, ServiceOrderStatus
from apps.service_orders.transitions import apply_transition
from apps.service_orders.workflow import has_unpaid_services
from apps.staff.models import employee_exists

from .models import Invoice, InvoiceDetail, InvoiceStatus

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class PaymentSummary:
    total: Decimal
    received: Decimal
    change: Decimal


@dataclass
class SettlementResult:
    invoice: Invoice
    payment: PaymentSummary
    promoted_order_ids: List[int] = field(default_factory=list)


def _as_decimal(value) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise AppValidationError(
            message="Amount received must be a number",
            detail=f"amount_received: {value!r} is not a valid amount.",
        )
    if not amount.is_finite() or amount < ZERO:
        raise AppValidationError(
            message="Amount received cannot be negative",
            detail=f"amount_received: {value!r} is not a valid amount.",
        )
    if amount != amount.quantize(CENT):
        raise AppValidationError(
            message="Amount received cannot have more than 2 decimal places",
            detail=f"amount_received: {value!r} is not a valid amount.",
        )
    return amount.quantize(CENT)


def _dedupe_ids(detail_ids: Iterable) -> List[int]:
    try:
        return list(dict.fromkeys(int(i) for i in detail_ids or ()))
    except (TypeError, ValueError):
        raise AppValidationError(
            message="Service order detail ids must be integers",
            detail="detail_ids: A valid list of integers is required.",
        )


def settle(
    *,
    medical_record_id,
    collector_id,
    amount_received,
    detail_ids,
    invoice_date=None,
) -> SettlementResult:
    """
    Create one invoice covering ``detail_ids`` and mark them paid.

    Every Pending order that has no unpaid detail left afterwards moves to
    In progress through the ``receive`` transition.
    """
    ids = _dedupe_ids(detail_ids)
    if not ids:
        raise AppValidationError(
            message="Select at least one service to pay",
            detail="detail_ids: This list may not be empty.",
        )
    received = _as_decimal(amount_received)

    if not medical_record_exists(medical_record_id):
        raise BadRequestError(
            message="Medical record does not exist",
            code="MEDICAL_RECORD_NOT_FOUND",
        )
    if not employee_exists(collector_id):
        raise BadRequestError(
            message="Collecting employee does not exist",
            code="EMPLOYEE_NOT_FOUND",
        )

    with transaction.atomic():
        details = list(
            ServiceOrderDetail.objects.select_for_update().filter(pk__in=ids).order_by("pk")
        )
        found = {detail.pk for detail in details}
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundError(
                message="Service order detail not found",
                detail=[f"No service order detail with id {i}." for i in missing],
                code="DETAIL_NOT_FOUND",
            )

        orders = list(
            ServiceOrder.objects.select_for_update()
            .filter(pk__in={detail.order_id for detail in details})
            .order_by("pk")
        )
        foreign = {o.pk for o in orders if o.medical_record_id != int(medical_record_id)}
        if foreign:
            raise BadRequestError(
                message="Some services do not belong to this medical record",
                detail=[
                    f"Detail {detail.pk} belongs to service order {detail.order_id}."
                    for detail in details
                    if detail.order_id in foreign
                ],
                code="DETAIL_RECORD_MISMATCH",
            )

        already_paid = [detail.pk for detail in details if detail.is_paid]
        if already_paid:
            raise ConflictError(
                message="Some services have already been paid",
                detail=[f"Detail {pk} is already paid." for pk in already_paid],
                code="DETAIL_ALREADY_PAID",
            )

        total = sum((detail.amount for detail in details), ZERO)
        if total <= ZERO:
            raise BadRequestError(
                message="Invoice total must be greater than zero",
                code="INVALID_TOTAL",
            )
        if received < total:
            raise BadRequestError(
                message="Amount received is less than the invoice total",
                detail=f"Total {total}, received {received}.",
                code="INSUFFICIENT_AMOUNT",
            )

        invoice = create_with_code(
            Invoice,
            "code",
            settings.CLINIC["INVOICE_CODE_PREFIX"],
            issued_at=invoice_date or timezone.now(),
            total_amount=total,
            amount_received=received,
            status=InvoiceStatus.ACTIVE,
            collected_by_id=collector_id,
            medical_record_id=medical_record_id,
        )
        InvoiceDetail.objects.bulk_create([
            InvoiceDetail(
                invoice=invoice,
                service_order_detail=detail,
                quantity=detail.quantity,
                amount=detail.amount,
            )
            for detail in details
        ])
        ServiceOrderDetail.objects.filter(pk__in=ids).update(is_paid=True)

        promoted = []
        for order in orders:
            if order.status == ServiceOrderStatus.PENDING and not has_unpaid_services(order):
                apply_transition(order, ServiceOrderStatus.IN_PROGRESS, trigger="settlement")
                promoted.append(order.pk)

    payment = PaymentSummary(total=total, received=received, change=max(received - total, ZERO))
    logger.info(
        "settlement_completed",
        invoice_id=invoice.id,
        invoice_code=invoice.code,
        medical_record_id=medical_record_id,
        detail_count=len(ids),
        total=str(total),
        change=str(payment.change),
        promoted_order_ids=promoted,
    )
    return SettlementResult(invoice=invoice, payment=payment, promoted_order_ids=promoted)


def cancel(invoice_id) -> Invoice:
    """
    Cancel an active invoice and return its services to unpaid.

    Refused while any covered service already has a result or any affected
    order is Completed. Affected In progress orders go back to Pending;
    Pending and Not sent orders keep their status.
    """
    with transaction.atomic():
        try:
            invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
        except Invoice.DoesNotExist:
            raise NotFoundError(
                message="Invoice not found",
                detail=f"No invoice with id {invoice_id}.",
            )
        if invoice.status == InvoiceStatus.CANCELLED:
            raise BadRequestError(
                message="Invoice has already been cancelled",
                code="INVOICE_ALREADY_CANCELLED",
            )

        detail_ids = list(
            invoice.lines.order_by("service_order_detail_id")
            .values_list("service_order_detail_id", flat=True)
        )
        details = list(
            ServiceOrderDetail.objects.select_for_update().filter(pk__in=detail_ids).order_by("pk")
        )
        orders = list(
            ServiceOrder.objects.select_for_update()
            .filter(pk__in={detail.order_id for detail in details})
            .order_by("pk")
        )

        completed = [o.code for o in orders if o.status == ServiceOrderStatus.COMPLETED]
        if completed:
            raise BlockError(
                message="Results have already been delivered for this invoice. "
                        "Cancel the delivered results first.",
                detail=[f"Service order {code} is completed." for code in completed],
                code="ORDER_COMPLETED",
            )
        if ServiceOrderDetail.objects.filter(pk__in=detail_ids, result__isnull=False).exists():
            raise BlockError(
                message="Results have already been recorded for services on this invoice.",
                code="RESULTS_RECORDED",
            )

        invoice.lines.all().delete()
        ServiceOrderDetail.objects.filter(pk__in=detail_ids).update(is_paid=False)

        reverted = []
        for order in orders:
            if order.status == ServiceOrderStatus.IN_PROGRESS:
                apply_transition(order, ServiceOrderStatus.PENDING, trigger="invoice_cancel")
                reverted.append(order.pk)

        invoice.status = InvoiceStatus.CANCELLED
        invoice.total_amount = ZERO
        invoice.cancelled_at = timezone.now()
        invoice.save(update_fields=["status", "total_amount", "cancelled_at"])

    logger.info(
        "invoice_cancelled",
        invoice_id=invoice.id,
        invoice_code=invoice.code,
        detail_count=len(detail_ids),
        reverted_order_ids=reverted,
    )
    return invoice
