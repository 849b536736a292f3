"""
Service order (phiếu chỉ định) and its line items.

A ServiceOrder belongs to one medical record and carries one
ServiceOrderDetail per ordered catalog service. Status codes are persisted and
sent on the wire as plain integers; do not renumber them.
"""

from dataclasses import dataclass
from typing import Union

from django.core.exceptions import ObjectDoesNotExist
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.catalog.models import Service
from apps.records.models import MedicalRecord
from apps.staff.models import Employee


class ServiceOrderStatus(models.IntegerChoices):
    NOT_SENT = 0, "Not sent"
    PENDING = 1, "Pending"
    IN_PROGRESS = 2, "In progress"
    COMPLETED = 3, "Completed"


class ServiceOrder(models.Model):
    code = models.CharField(max_length=30, unique=True)
    created_at = models.DateTimeField(default=timezone.now)
    status = models.PositiveSmallIntegerField(
        choices=ServiceOrderStatus.choices,
        default=ServiceOrderStatus.NOT_SENT,
    )
    medical_record = models.ForeignKey(
        MedicalRecord,
        on_delete=models.PROTECT,
        related_name="service_orders",
    )
    ordered_by = models.ForeignKey(
        Employee,
        on_delete=models.SET_NULL,
        related_name="service_orders",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "service_orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="service_ord_status_6f1c2a_idx"),
            models.Index(fields=["-created_at"], name="service_ord_created_8d4e0b_idx"),
        ]

    def __str__(self):
        return f"{self.code} ({self.get_status_display()})"


# ============================================================
# Payment state of a line item
# ============================================================
@dataclass(frozen=True)
class Unpaid:
    is_paid = False


@dataclass(frozen=True)
class Paid:
    invoice_detail_id: int
    is_paid = True


PaymentState = Union[Unpaid, Paid]


class ServiceOrderDetail(models.Model):
    """
    One ordered service.

    unit_price and amount are copied from the catalog when the line is
    created, so later catalog price changes do not touch existing orders.
    is_paid is written only by the settlement engine (apps.billing.settlement).
    """
    order = models.ForeignKey(
        ServiceOrder,
        on_delete=models.CASCADE,
        related_name="details",
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.PROTECT,
        related_name="order_details",
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    amount = models.DecimalField(max_digits=16, decimal_places=2)
    require_result = models.BooleanField(default=True)
    is_paid = models.BooleanField(default=False)

    class Meta:
        db_table = "service_order_details"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["order", "is_paid"], name="service_ord_order_i_3b7f91_idx"),
        ]

    def __str__(self):
        return f"{self.order_id}/{self.service_id} x{self.quantity}"

    @property
    def payment_state(self) -> PaymentState:
        try:
            line = self.invoice_line
        except ObjectDoesNotExist:
            return Unpaid()
        return Paid(invoice_detail_id=line.pk)

    @property
    def has_result(self) -> bool:
        try:
            self.result
        except ObjectDoesNotExist:
            return False
        return True
