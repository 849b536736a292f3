"""
Pytest configuration and fixtures.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.catalog.models import Room, Service, ServiceGroup, ServiceType
from apps.records.models import MedicalRecord
from apps.service_orders.models import ServiceOrderDetail, ServiceOrderStatus
from apps.service_orders.services import NewDetail, create_order
from apps.staff.models import Employee


@pytest.fixture
def api_client():
    """Return an API client for testing."""
    return APIClient()


# ────────────────────────────────────────────
# People and records
# ────────────────────────────────────────────
@pytest.fixture
def employee(db):
    return Employee.objects.create(code="NV001", full_name="Nguyen Thi Lan")


@pytest.fixture
def medical_record(db):
    return MedicalRecord.objects.create(code="BA000001", patient_name="Pham Thu Ha")


@pytest.fixture
def other_medical_record(db):
    return MedicalRecord.objects.create(code="BA000002", patient_name="Vo Quoc Bao")


# ────────────────────────────────────────────
# Catalog
# ────────────────────────────────────────────
@pytest.fixture
def lab_type(db):
    return ServiceType.objects.create(name="Laboratory")


@pytest.fixture
def imaging_type(db):
    return ServiceType.objects.create(name="Imaging")


@pytest.fixture
def lab_group(lab_type):
    return ServiceGroup.objects.create(name="Biochemistry", service_type=lab_type)


@pytest.fixture
def imaging_group(imaging_type):
    return ServiceGroup.objects.create(name="Ultrasound", service_type=imaging_type)


@pytest.fixture
def lab_room(db):
    return Room.objects.create(name="Lab 101")


@pytest.fixture
def glucose_service(lab_group, lab_room):
    """Lab service priced 100.00 that requires a result."""
    return Service.objects.create(
        code="XN001",
        name="Fasting blood glucose",
        unit="time",
        unit_price=Decimal("100.00"),
        group=lab_group,
        execution_room=lab_room,
        requires_result=True,
    )


@pytest.fixture
def cbc_service(lab_group, lab_room):
    """Lab service priced 50.00 that requires a result."""
    return Service.objects.create(
        code="XN002",
        name="Complete blood count",
        unit="time",
        unit_price=Decimal("50.00"),
        group=lab_group,
        execution_room=lab_room,
        requires_result=True,
    )


@pytest.fixture
def ultrasound_service(imaging_group):
    """Imaging service priced 150.00 that does not require a result."""
    return Service.objects.create(
        code="SA001",
        name="Abdominal ultrasound",
        unit="time",
        unit_price=Decimal("150.00"),
        group=imaging_group,
        requires_result=False,
    )


# ────────────────────────────────────────────
# Service orders
# ────────────────────────────────────────────
@pytest.fixture
def make_order(medical_record, employee):
    """Factory: make_order(service, service, ..., status=PENDING, record=None)."""

    def _make(*services, status=ServiceOrderStatus.PENDING, record=None, quantity=1):
        return create_order(
            medical_record_id=(record or medical_record).id,
            ordered_by_id=employee.id,
            status=status,
            details=[NewDetail(service_id=s.id, quantity=quantity) for s in services],
        )

    return _make


@pytest.fixture
def pending_order(make_order, glucose_service, cbc_service):
    """Pending order with two unpaid details: 100.00 and 50.00."""
    return make_order(glucose_service, cbc_service)


@pytest.fixture
def order_details(pending_order):
    return list(ServiceOrderDetail.objects.filter(order=pending_order).order_by("id"))


@pytest.fixture
def result_times():
    """received_at <= performed_at <= delivered_at."""
    received = timezone.now() - timedelta(hours=2)
    return {
        "received_at": received,
        "performed_at": received + timedelta(minutes=30),
        "delivered_at": received + timedelta(hours=1),
    }
