"""
Billing reads: invoice lookups and the per-record billing summary.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db.models import Count, Q, Sum

from apps.core.exceptions import NotFoundError
from apps.records.models import MedicalRecord
from apps.service_orders.models import ServiceOrder, ServiceOrderDetail

from .models import Invoice


def get_invoice(invoice_id) -> Invoice:
    try:
        return (
            Invoice.objects.select_related("collected_by", "medical_record")
            .prefetch_related("lines__service_order_detail__service")
            .get(pk=invoice_id)
        )
    except Invoice.DoesNotExist:
        raise NotFoundError(
            message="Invoice not found",
            detail=f"No invoice with id {invoice_id}.",
        )


@dataclass
class InvoiceFilter:
    search: str = ""
    medical_record_id: Optional[int] = None
    status: Optional[int] = None
    issued_from: Optional[datetime] = None
    issued_to: Optional[datetime] = None


def list_invoices(filters: InvoiceFilter = None):
    filters = filters or InvoiceFilter()
    queryset = Invoice.objects.select_related("collected_by", "medical_record").prefetch_related(
        "lines__service_order_detail__service"
    )

    search = (filters.search or "").strip()
    if search:
        queryset = queryset.filter(
            Q(code__icontains=search)
            | Q(medical_record__code__icontains=search)
            | Q(medical_record__patient_name__icontains=search)
        )
    if filters.medical_record_id is not None:
        queryset = queryset.filter(medical_record_id=filters.medical_record_id)
    if filters.status is not None:
        queryset = queryset.filter(status=filters.status)
    if filters.issued_from is not None:
        queryset = queryset.filter(issued_at__gte=filters.issued_from)
    if filters.issued_to is not None:
        queryset = queryset.filter(issued_at__lte=filters.issued_to)

    return queryset.order_by("-issued_at", "-id")


def billing_summary(medical_record_id) -> dict:
    """Counts and outstanding amount of the services ordered for one medical record."""
    try:
        record = MedicalRecord.objects.get(pk=medical_record_id)
    except MedicalRecord.DoesNotExist:
        raise NotFoundError(
            message="Medical record not found",
            detail=f"No medical record with id {medical_record_id}.",
        )

    totals = ServiceOrderDetail.objects.filter(order__medical_record=record).aggregate(
        total_service_details=Count("id"),
        unpaid_service_details=Count("id", filter=Q(is_paid=False)),
        unpaid_amount=Sum("amount", filter=Q(is_paid=False)),
    )
    unpaid = totals["unpaid_service_details"]

    return {
        "medical_record_id": record.id,
        "medical_record_code": record.code,
        "patient_name": record.patient_name,
        "total_service_orders": ServiceOrder.objects.filter(medical_record=record).count(),
        "total_service_details": totals["total_service_details"],
        "unpaid_service_details": unpaid,
        "unpaid_amount": totals["unpaid_amount"] or Decimal("0.00"),
        "payment_status": "unpaid" if unpaid else "paid",
    }
