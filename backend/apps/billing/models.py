"""
Invoice (hóa đơn) and invoice lines.

Invoices are only written by apps.billing.settlement. An active invoice's
total equals the sum of its lines; a cancelled invoice has no lines and a
zero total.
"""

from django.db import models

from apps.records.models import MedicalRecord
from apps.service_orders.models import ServiceOrderDetail
from apps.staff.models import Employee


class InvoiceStatus(models.IntegerChoices):
    ACTIVE = 0, "Active"
    CANCELLED = 1, "Cancelled"


class Invoice(models.Model):
    code = models.CharField(max_length=30, unique=True)
    issued_at = models.DateTimeField()
    total_amount = models.DecimalField(max_digits=16, decimal_places=2)
    amount_received = models.DecimalField(max_digits=16, decimal_places=2)
    status = models.PositiveSmallIntegerField(
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.ACTIVE,
    )
    collected_by = models.ForeignKey(
        Employee,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    medical_record = models.ForeignKey(
        MedicalRecord,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "invoices"
        ordering = ["-issued_at", "-id"]

    def __str__(self):
        return f"{self.code} ({self.get_status_display()})"


class InvoiceDetail(models.Model):
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    service_order_detail = models.OneToOneField(
        ServiceOrderDetail,
        on_delete=models.PROTECT,
        related_name="invoice_line",
    )
    quantity = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=16, decimal_places=2)

    class Meta:
        db_table = "invoice_details"
        ordering = ["id"]

    def __str__(self):
        return f"{self.invoice_id}/{self.service_order_detail_id}"
