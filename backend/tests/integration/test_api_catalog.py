"""
Integration tests for the catalog endpoints and the health check.
"""

import pytest
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
class TestCatalogAPI:

    def test_list_services(self, api_client, glucose_service, cbc_service, ultrasound_service):
        response = api_client.get(reverse("service-list"))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["pagination"]["total"] == 3
        assert [s["code"] for s in data["results"]] == ["SA001", "XN001", "XN002"]

    def test_search_by_name(self, api_client, glucose_service, cbc_service):
        response = api_client.get(reverse("service-list"), {"search": "glucose"})

        rows = response.json()["results"]
        assert [s["code"] for s in rows] == ["XN001"]
        assert rows[0]["unit_price"] == "100.00"
        assert rows[0]["type_name"] == "Laboratory"
        assert rows[0]["execution_room"]["name"] == "Lab 101"

    def test_filter_by_type(self, api_client, glucose_service, ultrasound_service, imaging_type):
        response = api_client.get(reverse("service-list"), {"type_id": imaging_type.id})

        assert [s["code"] for s in response.json()["results"]] == ["SA001"]

    def test_retrieve_missing_service(self, api_client, db):
        response = api_client.get(reverse("service-detail", kwargs={"pk": 777}))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["type"] == "error"


@pytest.mark.django_db
def test_health_check(client):
    response = client.get(reverse("health"))

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}
