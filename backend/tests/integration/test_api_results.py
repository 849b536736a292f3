"""
Integration tests for the results API.
"""

import pytest
from django.urls import reverse
from rest_framework import status

from apps.results.models import Result
from apps.service_orders.models import ServiceOrderDetail


@pytest.fixture
def paid_details(order_details):
    ServiceOrderDetail.objects.filter(pk__in=[d.pk for d in order_details]).update(is_paid=True)
    return order_details


@pytest.fixture
def result_payload(paid_details, result_times):
    return {
        "detail_id": paid_details[0].id,
        "received_at": result_times["received_at"].isoformat(),
        "performed_at": result_times["performed_at"].isoformat(),
        "delivered_at": result_times["delivered_at"].isoformat(),
        "result_text": "Glucose 5.4 mmol/L",
        "conclusion": "Within normal range",
    }


@pytest.mark.django_db
class TestResultAPI:

    def test_create_result(self, api_client, result_payload, pending_order):
        response = api_client.post(reverse("result-list"), result_payload, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["conclusion"] == "Within normal range"
        assert data["note"] is None
        assert data["measurement"] is None
        assert data["service_order_detail"]["service"]["code"] == "XN001"
        assert data["service_order_detail"]["service_order"]["id"] == pending_order.id

    def test_chronology_is_checked(self, api_client, result_payload, result_times):
        result_payload["performed_at"] = (
            result_times["received_at"].replace(year=result_times["received_at"].year - 1).isoformat()
        )

        response = api_client.post(reverse("result-list"), result_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "INVALID_CHRONOLOGY"
        assert response.json()["message"] == "Performed time cannot be earlier than received time."
        assert not Result.objects.exists()

    def test_unpaid_detail_is_blocked(self, api_client, result_payload, order_details):
        ServiceOrderDetail.objects.filter(pk=order_details[0].pk).update(is_paid=False)

        response = api_client.post(reverse("result-list"), result_payload, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "DETAIL_UNPAID"

    def test_second_result_is_conflict(self, api_client, result_payload):
        api_client.post(reverse("result-list"), result_payload, format="json")

        response = api_client.post(reverse("result-list"), result_payload, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "DUPLICATE_RESULT"

    def test_missing_text_is_validation_error(self, api_client, result_payload):
        del result_payload["conclusion"]

        response = api_client.post(reverse("result-list"), result_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_patch_result(self, api_client, result_payload):
        result_id = api_client.post(reverse("result-list"), result_payload, format="json").json()["id"]
        url = reverse("result-detail", kwargs={"pk": result_id})

        response = api_client.patch(url, {"note": "Fasting sample"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["note"] == "Fasting sample"
        assert response.json()["result_text"] == "Glucose 5.4 mmol/L"

    def test_empty_patch(self, api_client, result_payload):
        result_id = api_client.post(reverse("result-list"), result_payload, format="json").json()["id"]

        response = api_client.patch(reverse("result-detail", kwargs={"pk": result_id}), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_filters(self, api_client, result_payload, paid_details, pending_order):
        first = api_client.post(reverse("result-list"), result_payload, format="json").json()["id"]
        result_payload["detail_id"] = paid_details[1].id
        result_payload["result_text"] = "WBC 6.1"
        second = api_client.post(reverse("result-list"), result_payload, format="json").json()["id"]

        by_order = api_client.get(reverse("result-list"), {"service_order_id": pending_order.id}).json()
        by_detail = api_client.get(reverse("result-list"), {"detail_id": paid_details[1].id}).json()
        by_text = api_client.get(reverse("result-list"), {"search": "glucose"}).json()

        assert {r["id"] for r in by_order["results"]} == {first, second}
        assert [r["id"] for r in by_detail["results"]] == [second]
        assert [r["id"] for r in by_text["results"]] == [first]


@pytest.mark.django_db
class TestResultMeasurementAPI:

    def test_create_and_patch_measurement(self, api_client, result_payload):
        result_id = api_client.post(reverse("result-list"), result_payload, format="json").json()["id"]

        create = api_client.post(
            reverse("result-measurement-list"),
            {"result_id": result_id, "indicator": "Glucose", "value": "5.4"},
            format="json",
        )
        assert create.status_code == status.HTTP_201_CREATED
        assert create.json()["is_abnormal"] is False

        url = reverse("result-measurement-detail", kwargs={"pk": create.json()["id"]})
        update = api_client.patch(url, {"value": "7.9", "is_abnormal": True}, format="json")
        assert update.status_code == status.HTTP_200_OK
        assert update.json()["value"] == "7.9"
        assert update.json()["is_abnormal"] is True

        result = api_client.get(reverse("result-detail", kwargs={"pk": result_id})).json()
        assert result["measurement"]["indicator"] == "Glucose"

    def test_second_measurement_is_conflict(self, api_client, result_payload):
        result_id = api_client.post(reverse("result-list"), result_payload, format="json").json()["id"]
        payload = {"result_id": result_id, "indicator": "Glucose", "value": "5.4"}
        api_client.post(reverse("result-measurement-list"), payload, format="json")

        response = api_client.post(reverse("result-measurement-list"), payload, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "DUPLICATE_RESULT_DETAIL"

    def test_measurement_for_missing_result(self, api_client, db):
        response = api_client.post(
            reverse("result-measurement-list"),
            {"result_id": 4321, "indicator": "Glucose", "value": "5.4"},
            format="json",
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
