"""
Catalog URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import RoomViewSet, ServiceGroupViewSet, ServiceTypeViewSet, ServiceViewSet

router = DefaultRouter()
router.register("services", ServiceViewSet, basename="service")
router.register("groups", ServiceGroupViewSet, basename="service-group")
router.register("types", ServiceTypeViewSet, basename="service-type")
router.register("rooms", RoomViewSet, basename="room")

urlpatterns = [
    path("", include(router.urls)),
]
