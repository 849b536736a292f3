"""
Medical record (bệnh án).

Owned by patient intake; the service-order and billing workflow only needs to
know that a record exists and which orders/invoices hang off it.
"""

from django.db import models
from django.utils import timezone


class MedicalRecord(models.Model):

    class Status(models.IntegerChoices):
        WAITING_FOR_EXAM = 0, "Waiting for exam"
        IN_PROGRESS = 1, "In progress"
        COMPLETED = 2, "Completed"

    code = models.CharField(max_length=20, unique=True)
    patient_name = models.CharField(max_length=200)
    opened_at = models.DateTimeField(default=timezone.now)
    status = models.PositiveSmallIntegerField(choices=Status.choices, default=Status.WAITING_FOR_EXAM)

    class Meta:
        db_table = "medical_records"
        ordering = ["-opened_at"]

    def __str__(self):
        return f"{self.code} - {self.patient_name}"


def medical_record_exists(medical_record_id) -> bool:
    return MedicalRecord.objects.filter(pk=medical_record_id).exists()
