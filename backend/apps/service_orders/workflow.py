"""
Workflow flags derived from a service order's details.

None of these are stored; they are recomputed from the detail rows (payment
flag, saved result) every time they are read. The list endpoint computes the
same flags in SQL through annotate_flags() so a page of orders costs one
query.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db.models import Count, Exists, OuterRef, Q, Sum

from .models import ServiceOrder, ServiceOrderDetail, ServiceOrderStatus


def has_details(order: ServiceOrder) -> bool:
    return order.details.exists()


def has_unpaid_services(order: ServiceOrder) -> bool:
    return order.details.filter(is_paid=False).exists()


def all_results_completed(order: ServiceOrder) -> bool:
    """True when every detail that requires a result has one (vacuously true without such details)."""
    return not order.details.filter(require_result=True, result__isnull=True).exists()


def has_saved_results(order: ServiceOrder) -> bool:
    return order.details.filter(result__isnull=False).exists()


def is_executing(order: ServiceOrder) -> bool:
    return order.status >= ServiceOrderStatus.IN_PROGRESS


def can_delete_service_order(status: int) -> bool:
    return status < ServiceOrderStatus.IN_PROGRESS


@dataclass(frozen=True)
class OrderFlags:
    has_unpaid_services: bool
    all_results_completed: bool
    is_executing: bool
    has_saved_results: bool
    can_delete: bool


def order_flags(order: ServiceOrder) -> OrderFlags:
    return OrderFlags(
        has_unpaid_services=has_unpaid_services(order),
        all_results_completed=all_results_completed(order),
        is_executing=is_executing(order),
        has_saved_results=has_saved_results(order),
        can_delete=can_delete_service_order(order.status),
    )


# ============================================================
# Listing
# ============================================================
STATUS_GROUPS = {
    "active": (ServiceOrderStatus.PENDING, ServiceOrderStatus.IN_PROGRESS),
    "completed": (ServiceOrderStatus.COMPLETED,),
    "all": None,
}


@dataclass
class ServiceOrderFilter:
    search: str = ""
    medical_record_id: Optional[int] = None
    status: Optional[int] = None
    status_group: str = "all"
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    service_type: Optional[str] = None


def annotate_flags(queryset):
    details = ServiceOrderDetail.objects.filter(order=OuterRef("pk"))
    return queryset.annotate(
        has_unpaid_services=Exists(details.filter(is_paid=False)),
        all_results_completed=~Exists(details.filter(require_result=True, result__isnull=True)),
        has_saved_results=Exists(details.filter(result__isnull=False)),
        detail_count=Count("details"),
        total_amount=Sum("details__amount"),
    )


def list_service_orders(filters: ServiceOrderFilter = None):
    """Orders matching ``filters``, newest first, with workflow flags annotated."""
    filters = filters or ServiceOrderFilter()
    queryset = ServiceOrder.objects.select_related("medical_record", "ordered_by")

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

    statuses = STATUS_GROUPS.get(filters.status_group or "all")
    if statuses is not None:
        queryset = queryset.filter(status__in=statuses)

    if filters.created_from is not None:
        queryset = queryset.filter(created_at__gte=filters.created_from)
    if filters.created_to is not None:
        queryset = queryset.filter(created_at__lte=filters.created_to)

    # Subquery keeps the details join single so the Count/Sum below stay exact.
    if filters.service_type:
        matching = ServiceOrderDetail.objects.filter(
            Q(service__service_type__name__iexact=filters.service_type)
            | Q(
                service__service_type__isnull=True,
                service__group__service_type__name__iexact=filters.service_type,
            )
        ).values("order_id")
        queryset = queryset.filter(pk__in=matching)

    return annotate_flags(queryset).order_by("-created_at", "-id")
