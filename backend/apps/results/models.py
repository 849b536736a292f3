"""
Result sheet (phiếu trả kết quả) for one service order detail.
"""

from django.db import models

from apps.service_orders.models import ServiceOrderDetail


class Result(models.Model):
    detail = models.OneToOneField(
        ServiceOrderDetail,
        on_delete=models.PROTECT,
        related_name="result",
    )
    received_at = models.DateTimeField()
    performed_at = models.DateTimeField()
    delivered_at = models.DateTimeField()
    result_text = models.TextField()
    conclusion = models.TextField()
    note = models.CharField(max_length=1000, null=True, blank=True)
    url = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "results"
        ordering = ["-delivered_at", "-id"]

    def __str__(self):
        return f"Result for detail {self.detail_id}"


class ResultDetail(models.Model):
    """Measured indicator attached to a result; at most one per result."""
    result = models.OneToOneField(
        Result,
        on_delete=models.CASCADE,
        related_name="measurement",
    )
    indicator = models.CharField(max_length=255)
    value = models.CharField(max_length=255)
    is_abnormal = models.BooleanField(default=False)

    class Meta:
        db_table = "result_details"
        ordering = ["id"]

    def __str__(self):
        return f"{self.indicator}={self.value}"
