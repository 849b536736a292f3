"""
Billing URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import InvoiceViewSet, billing_summary

router = DefaultRouter()
router.register("invoices", InvoiceViewSet, basename="invoice")

urlpatterns = [
    path(
        "medical-records/<int:medical_record_id>/billing-summary/",
        billing_summary,
        name="billing-summary",
    ),
    path("", include(router.urls)),
]
