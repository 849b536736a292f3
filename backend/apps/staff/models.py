"""
Employee model.

Only the fields the ordering and billing workflow reads; the full HR record
(department, title, position, account) is maintained elsewhere.
"""

from django.db import models


class Employee(models.Model):
    code = models.CharField(max_length=20, unique=True)
    full_name = models.CharField(max_length=200)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "employees"
        ordering = ["code"]

    def __str__(self):
        return f"{self.full_name} ({self.code})"


def employee_exists(employee_id) -> bool:
    return Employee.objects.filter(pk=employee_id).exists()
