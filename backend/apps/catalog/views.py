"""
Catalog views (read only).
"""

from django.db.models import Q
from rest_framework import viewsets

from .models import Room, Service, ServiceGroup, ServiceType
from .serializers import (
    RoomSerializer,
    ServiceGroupSerializer,
    ServiceSerializer,
    ServiceTypeSerializer,
)


class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET /api/catalog/services/                    → all services
    GET /api/catalog/services/?search=glucose     → by code or name
    GET /api/catalog/services/?group_id=3&type_id=1
    """
    serializer_class = ServiceSerializer

    def get_queryset(self):
        queryset = Service.objects.select_related(
            "group__service_type", "service_type", "execution_room"
        )

        search = self.request.query_params.get("search", "").strip()
        if search:
            queryset = queryset.filter(Q(code__icontains=search) | Q(name__icontains=search))

        group_id = self.request.query_params.get("group_id")
        if group_id:
            queryset = queryset.filter(group_id=group_id)

        type_id = self.request.query_params.get("type_id")
        if type_id:
            queryset = queryset.filter(
                Q(service_type_id=type_id)
                | Q(service_type__isnull=True, group__service_type_id=type_id)
            )

        return queryset


class ServiceGroupViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ServiceGroup.objects.select_related("service_type")
    serializer_class = ServiceGroupSerializer


class ServiceTypeViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ServiceType.objects.all()
    serializer_class = ServiceTypeSerializer


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Room.objects.all()
    serializer_class = RoomSerializer
