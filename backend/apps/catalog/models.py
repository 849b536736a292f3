"""
Service catalog: what the clinic can order and what it costs.

ServiceType (laboratory / imaging / procedure / exam)
  └─ ServiceGroup
       └─ Service  ── executed in an optional Room
"""

from django.core.validators import MinValueValidator
from django.db import models


class ServiceType(models.Model):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        db_table = "service_types"
        ordering = ["name"]

    def __str__(self):
        return self.name


class ServiceGroup(models.Model):
    name = models.CharField(max_length=150)
    service_type = models.ForeignKey(
        ServiceType,
        on_delete=models.PROTECT,
        related_name="groups",
    )

    class Meta:
        db_table = "service_groups"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Room(models.Model):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        db_table = "rooms"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Service(models.Model):
    code = models.CharField(max_length=30, unique=True)
    name = models.CharField(max_length=200)
    unit = models.CharField(max_length=30, blank=True, default="")
    unit_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    group = models.ForeignKey(
        ServiceGroup,
        on_delete=models.PROTECT,
        related_name="services",
    )
    # Overrides the group's type when a group mixes service kinds
    service_type = models.ForeignKey(
        ServiceType,
        on_delete=models.PROTECT,
        related_name="services",
        null=True,
        blank=True,
    )
    execution_room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        related_name="services",
        null=True,
        blank=True,
    )
    requires_result = models.BooleanField(default=True)
    reference_min = models.CharField(max_length=50, blank=True, null=True)
    reference_max = models.CharField(max_length=50, blank=True, null=True)

    class Meta:
        db_table = "services"
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def type_name(self):
        service_type = self.service_type or self.group.service_type
        return service_type.name if service_type else None
