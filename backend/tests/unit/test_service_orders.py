"""
Unit tests for the service order store.
"""

from decimal import Decimal

import pytest

from apps.core.exceptions import (
    AppValidationError,
    BadRequestError,
    BlockError,
    ConflictError,
    NotFoundError,
)
from apps.service_orders.models import ServiceOrder, ServiceOrderDetail, ServiceOrderStatus
from apps.service_orders.services import (
    NewDetail,
    add_detail,
    create_order,
    delete_detail,
    delete_order,
    get_order,
    list_order_details,
    update_detail,
)

S = ServiceOrderStatus


def _set_status(order, status):
    ServiceOrder.objects.filter(pk=order.pk).update(status=status)


@pytest.mark.django_db
class TestCreateOrder:

    def test_generates_code_and_snapshots_prices(self, medical_record, employee, cbc_service):
        order = create_order(
            medical_record_id=medical_record.id,
            ordered_by_id=employee.id,
            details=[NewDetail(service_id=cbc_service.id, quantity=2)],
        )

        assert order.code == "PCD000001"
        assert order.status == S.NOT_SENT
        detail = order.details.get()
        assert detail.unit_price == Decimal("50.00")
        assert detail.amount == Decimal("100.00")
        assert detail.require_result is True
        assert detail.is_paid is False

    def test_catalog_price_change_does_not_touch_existing_lines(self, pending_order, glucose_service):
        glucose_service.unit_price = Decimal("999.00")
        glucose_service.save()

        detail = pending_order.details.get(service=glucose_service)
        assert detail.amount == Decimal("100.00")

    def test_codes_increase(self, make_order, glucose_service):
        first = make_order(glucose_service)
        second = make_order(glucose_service)
        assert (first.code, second.code) == ("PCD000001", "PCD000002")

    def test_explicit_code(self, medical_record):
        order = create_order(medical_record_id=medical_record.id, code=" pcd-manual ")
        assert order.code == "PCD-MANUAL"

    def test_explicit_duplicate_code(self, medical_record):
        create_order(medical_record_id=medical_record.id, code="PCD-1")

        with pytest.raises(ConflictError):
            create_order(medical_record_id=medical_record.id, code="pcd-1")

    def test_pending_requires_details(self, medical_record):
        with pytest.raises(BlockError) as exc_info:
            create_order(medical_record_id=medical_record.id, status=S.PENDING)

        assert exc_info.value.code == "ORDER_HAS_NO_DETAILS"
        assert ServiceOrder.objects.count() == 0

    @pytest.mark.parametrize("status", [S.IN_PROGRESS, S.COMPLETED])
    def test_cannot_start_executing(self, medical_record, glucose_service, status):
        with pytest.raises(BlockError):
            create_order(
                medical_record_id=medical_record.id,
                status=status,
                details=[NewDetail(service_id=glucose_service.id)],
            )

    def test_unknown_medical_record(self, db):
        with pytest.raises(BadRequestError):
            create_order(medical_record_id=4040)

    def test_unknown_service(self, medical_record):
        with pytest.raises(NotFoundError) as exc_info:
            create_order(medical_record_id=medical_record.id, details=[NewDetail(service_id=4040)])

        assert exc_info.value.code == "SERVICE_NOT_FOUND"
        assert ServiceOrder.objects.count() == 0

    def test_require_result_override(self, medical_record, glucose_service):
        order = create_order(
            medical_record_id=medical_record.id,
            details=[NewDetail(service_id=glucose_service.id, require_result=False)],
        )
        assert order.details.get().require_result is False


@pytest.mark.django_db
class TestDetails:

    def test_add_detail(self, pending_order, ultrasound_service):
        detail = add_detail(pending_order.id, ultrasound_service.id, quantity=2)

        assert detail.amount == Decimal("300.00")
        assert detail.require_result is False
        assert pending_order.details.count() == 3

    def test_add_detail_to_executing_order(self, pending_order, ultrasound_service):
        _set_status(pending_order, S.IN_PROGRESS)

        with pytest.raises(BlockError) as exc_info:
            add_detail(pending_order.id, ultrasound_service.id)

        assert exc_info.value.code == "ORDER_EXECUTING"

    def test_add_detail_zero_quantity(self, pending_order, ultrasound_service):
        with pytest.raises(AppValidationError):
            add_detail(pending_order.id, ultrasound_service.id, quantity=0)

    @pytest.mark.parametrize("quantity", ["abc", None, "1.5"])
    def test_add_detail_non_numeric_quantity(self, pending_order, ultrasound_service, quantity):
        with pytest.raises(AppValidationError):
            add_detail(pending_order.id, ultrasound_service.id, quantity=quantity)

        assert pending_order.details.count() == 2

    def test_add_detail_non_numeric_service_id(self, pending_order):
        with pytest.raises(AppValidationError):
            add_detail(pending_order.id, "xyz")

    def test_update_detail_non_numeric_input(self, order_details):
        with pytest.raises(AppValidationError):
            update_detail(order_details[0].id, quantity="many")
        with pytest.raises(AppValidationError):
            update_detail(order_details[0].id, service_id="xyz")

        assert ServiceOrderDetail.objects.get(pk=order_details[0].pk).quantity == 1

    def test_add_detail_missing_order(self, db, ultrasound_service):
        with pytest.raises(NotFoundError):
            add_detail(999, ultrasound_service.id)

    def test_update_quantity_recomputes_amount(self, order_details):
        detail = update_detail(order_details[1].id, quantity=4)
        assert detail.amount == Decimal("200.00")

    def test_update_service_takes_new_price(self, order_details, ultrasound_service):
        detail = update_detail(order_details[0].id, service_id=ultrasound_service.id)

        assert detail.service_id == ultrasound_service.id
        assert detail.unit_price == Decimal("150.00")
        assert detail.amount == Decimal("150.00")
        assert detail.require_result is False

    def test_update_paid_detail_is_blocked(self, order_details):
        ServiceOrderDetail.objects.filter(pk=order_details[0].pk).update(is_paid=True)

        with pytest.raises(BlockError) as exc_info:
            update_detail(order_details[0].id, quantity=3)

        assert exc_info.value.code == "DETAIL_ALREADY_PAID"

    def test_update_without_changes(self, order_details):
        with pytest.raises(AppValidationError):
            update_detail(order_details[0].id)

    def test_delete_detail(self, pending_order, order_details):
        delete_detail(order_details[0].id)
        assert pending_order.details.count() == 1

    def test_delete_paid_detail_is_blocked(self, order_details):
        ServiceOrderDetail.objects.filter(pk=order_details[0].pk).update(is_paid=True)

        with pytest.raises(BlockError):
            delete_detail(order_details[0].id)

    def test_list_order_details(self, pending_order, order_details):
        assert [d.id for d in list_order_details(pending_order.id)] == [d.id for d in order_details]

    def test_list_details_of_missing_order(self, db):
        with pytest.raises(NotFoundError):
            list_order_details(31337)


@pytest.mark.django_db
class TestDeleteOrder:

    def test_delete_cascades_details(self, pending_order):
        delete_order(pending_order.id)

        assert not ServiceOrder.objects.filter(pk=pending_order.pk).exists()
        assert ServiceOrderDetail.objects.count() == 0

    @pytest.mark.parametrize("status", [S.IN_PROGRESS, S.COMPLETED])
    def test_executing_order_cannot_be_deleted(self, pending_order, status):
        _set_status(pending_order, status)

        with pytest.raises(BlockError):
            delete_order(pending_order.id)

        assert get_order(pending_order.id).status == status

    def test_order_with_paid_detail_cannot_be_deleted(self, pending_order, order_details):
        ServiceOrderDetail.objects.filter(pk=order_details[0].pk).update(is_paid=True)

        with pytest.raises(BlockError) as exc_info:
            delete_order(pending_order.id)

        assert exc_info.value.code == "ORDER_HAS_PAID_SERVICES"

    def test_missing_order(self, db):
        with pytest.raises(NotFoundError):
            delete_order(8080)
