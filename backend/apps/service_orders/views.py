"""
Service order views.
"""

import structlog
from prometheus_client import Counter
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import BaseAppException

from . import services, workflow
from .models import ServiceOrderDetail
from .serializers import (
    DetailCreateSerializer,
    DetailUpdateSerializer,
    ServiceOrderCreateSerializer,
    ServiceOrderDetailSerializer,
    ServiceOrderFilterSerializer,
    ServiceOrderSerializer,
    StatusUpdateSerializer,
)

logger = structlog.get_logger(__name__)

# Prometheus metrics
SERVICE_ORDER_TRANSITION_TOTAL = Counter(
    "service_order_transition_total",
    "Requested service order status changes",
    ["from", "to", "result"],  # result: success, blocked
)


class ServiceOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    list:     GET  /api/service-orders/?status_group=active&search=PCD
    retrieve: GET  /api/service-orders/{id}/
    create:   POST /api/service-orders/
    destroy:  DELETE /api/service-orders/{id}/
    status:   POST /api/service-orders/{id}/status/   {"status": 2}
    details:  GET  /api/service-orders/{id}/details/
    """
    serializer_class = ServiceOrderSerializer
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        filters = ServiceOrderFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return workflow.list_service_orders(filters.to_filter())

    def get_object(self):
        return services.get_order(self.kwargs["pk"])

    def create(self, request, *args, **kwargs):
        serializer = ServiceOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = services.create_order(
            medical_record_id=data["medical_record_id"],
            ordered_by_id=data["ordered_by_id"],
            status=data["status"],
            created_at=data["created_at"],
            code=data["code"] or None,
            details=data["details"],
        )
        return Response(ServiceOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        services.delete_order(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["status"]

        current = services.get_order(pk).status
        try:
            order = services.update_status(pk, target)
        except BaseAppException as exc:
            SERVICE_ORDER_TRANSITION_TOTAL.labels(current, target, "blocked").inc()
            logger.warning(
                "service_order_status_rejected",
                service_order_id=pk,
                from_status=current,
                to_status=target,
                code=exc.code,
            )
            raise

        SERVICE_ORDER_TRANSITION_TOTAL.labels(current, target, "success").inc()
        return Response(ServiceOrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def details(self, request, pk=None):
        details = services.list_order_details(pk)
        return Response(ServiceOrderDetailSerializer(details, many=True).data)


class ServiceOrderDetailViewSet(viewsets.GenericViewSet):
    """
    create:         POST   /api/service-orders/details/
    partial_update: PATCH  /api/service-orders/details/{id}/
    destroy:        DELETE /api/service-orders/details/{id}/
    """
    queryset = ServiceOrderDetail.objects.all()
    serializer_class = ServiceOrderDetailSerializer
    lookup_value_regex = r"\d+"

    def create(self, request):
        serializer = DetailCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        detail = services.add_detail(**serializer.validated_data)
        return Response(ServiceOrderDetailSerializer(detail).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = DetailUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        detail = services.update_detail(pk, **serializer.validated_data)
        return Response(ServiceOrderDetailSerializer(detail).data)

    def destroy(self, request, pk=None):
        services.delete_detail(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
