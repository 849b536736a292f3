"""
Integration tests for the service order API.
"""

import pytest
from django.urls import reverse
from rest_framework import status

from apps.service_orders.models import ServiceOrder, ServiceOrderDetail, ServiceOrderStatus


@pytest.mark.django_db
class TestServiceOrderAPI:

    def test_create_order_with_details(self, api_client, medical_record, employee, glucose_service):
        """POST creates a pending order and returns its flags."""
        url = reverse("service-order-list")
        payload = {
            "medical_record_id": medical_record.id,
            "ordered_by_id": employee.id,
            "status": 1,
            "details": [{"service_id": glucose_service.id, "quantity": 2}],
        }

        response = api_client.post(url, payload, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["code"] == "PCD000001"
        assert data["status"] == 1
        assert data["status_label"] == "Pending"
        assert data["flags"]["has_unpaid_services"] is True
        assert data["flags"]["can_delete"] is True
        assert ServiceOrderDetail.objects.get().amount == 200

    def test_create_pending_without_details_is_blocked(self, api_client, medical_record):
        url = reverse("service-order-list")

        response = api_client.post(url, {"medical_record_id": medical_record.id, "status": 1}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["type"] == "error"
        assert body["code"] == "ORDER_HAS_NO_DETAILS"
        assert ServiceOrder.objects.count() == 0

    def test_create_validation_error_shape(self, api_client):
        url = reverse("service-order-list")

        response = api_client.post(url, {"status": 7}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert any(line.startswith("medical_record_id") for line in body["detail"])

    def test_list_is_paginated_with_flags(self, api_client, pending_order):
        response = api_client.get(reverse("service-order-list"), {"status_group": "active"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "total_pages": 1}
        row = data["results"][0]
        assert row["id"] == pending_order.id
        assert row["flags"]["has_unpaid_services"] is True
        assert row["flags"]["detail_count"] == 2
        assert row["flags"]["total_amount"] == "150.00"

    def test_list_rejects_unknown_status_group(self, api_client, pending_order):
        response = api_client.get(reverse("service-order-list"), {"status_group": "archived"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve_and_missing(self, api_client, pending_order):
        ok = api_client.get(reverse("service-order-detail", kwargs={"pk": pending_order.id}))
        missing = api_client.get(reverse("service-order-detail", kwargs={"pk": 99999}))

        assert ok.status_code == status.HTTP_200_OK
        assert ok.json()["code"] == pending_order.code
        assert missing.status_code == status.HTTP_404_NOT_FOUND
        assert missing.json()["code"] == "NOT_FOUND"

    def test_details_endpoint(self, api_client, pending_order):
        url = reverse("service-order-details", kwargs={"pk": pending_order.id})

        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        details = response.json()
        assert [d["service"]["code"] for d in details] == ["XN001", "XN002"]
        assert details[0]["payment_state"] == {"state": "unpaid", "invoice_detail_id": None}
        assert details[0]["has_result"] is False

    def test_status_change(self, api_client, pending_order):
        url = reverse("service-order-change-status", kwargs={"pk": pending_order.id})

        response = api_client.post(url, {"status": 0}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == ServiceOrderStatus.NOT_SENT

    def test_receive_unpaid_returns_conflict(self, api_client, pending_order):
        url = reverse("service-order-change-status", kwargs={"pk": pending_order.id})

        response = api_client.post(url, {"status": 2}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "ORDER_HAS_UNPAID_SERVICES"
        pending_order.refresh_from_db()
        assert pending_order.status == ServiceOrderStatus.PENDING

    def test_delete_order(self, api_client, pending_order):
        response = api_client.delete(reverse("service-order-detail", kwargs={"pk": pending_order.id}))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not ServiceOrder.objects.exists()


@pytest.mark.django_db
class TestServiceOrderLineAPI:

    def test_add_update_delete_line(self, api_client, pending_order, ultrasound_service):
        create = api_client.post(
            reverse("service-order-line-list"),
            {"order_id": pending_order.id, "service_id": ultrasound_service.id},
            format="json",
        )
        assert create.status_code == status.HTTP_201_CREATED
        line_id = create.json()["id"]
        assert create.json()["amount"] == "150.00"

        url = reverse("service-order-line-detail", kwargs={"pk": line_id})
        update = api_client.patch(url, {"quantity": 3}, format="json")
        assert update.status_code == status.HTTP_200_OK
        assert update.json()["amount"] == "450.00"

        delete = api_client.delete(url)
        assert delete.status_code == status.HTTP_204_NO_CONTENT
        assert pending_order.details.count() == 2

    def test_empty_patch(self, api_client, order_details):
        url = reverse("service-order-line-detail", kwargs={"pk": order_details[0].id})

        response = api_client.patch(url, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_paid_line_cannot_change(self, api_client, order_details):
        ServiceOrderDetail.objects.filter(pk=order_details[0].pk).update(is_paid=True)
        url = reverse("service-order-line-detail", kwargs={"pk": order_details[0].id})

        response = api_client.patch(url, {"quantity": 2}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "DETAIL_ALREADY_PAID"
