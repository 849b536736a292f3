"""
Service order URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ServiceOrderDetailViewSet, ServiceOrderViewSet

# "details" is registered first so /details/ is not read as an order id.
router = DefaultRouter()
router.register("details", ServiceOrderDetailViewSet, basename="service-order-line")
router.register("", ServiceOrderViewSet, basename="service-order")

urlpatterns = [
    path("", include(router.urls)),
]
