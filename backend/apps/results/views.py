"""
Result views.
"""

from rest_framework import mixins, status, viewsets
from rest_framework.response import Response

from . import services
from .serializers import (
    ResultCreateSerializer,
    ResultDetailCreateSerializer,
    ResultDetailSerializer,
    ResultDetailUpdateSerializer,
    ResultFilterSerializer,
    ResultSerializer,
    ResultUpdateSerializer,
)


class ResultViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    GET   /api/results/?service_order_id=3&search=glucose
    POST  /api/results/
    GET   /api/results/{id}/
    PATCH /api/results/{id}/
    """
    serializer_class = ResultSerializer
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        filters = ResultFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return services.list_results(filters.to_filter())

    def get_object(self):
        return services.get_result(self.kwargs["pk"])

    def create(self, request):
        serializer = ResultCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        result = services.create_result(data.pop("detail_id"), **data)
        return Response(
            ResultSerializer(services.get_result(result.id)).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        serializer = ResultUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.update_result(pk, **serializer.validated_data)
        return Response(ResultSerializer(result).data)


class ResultDetailViewSet(viewsets.GenericViewSet):
    """
    POST  /api/results/details/
    PATCH /api/results/details/{id}/
    """
    serializer_class = ResultDetailSerializer
    lookup_value_regex = r"\d+"

    def create(self, request):
        serializer = ResultDetailCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        measurement = services.create_result_detail(data.pop("result_id"), **data)
        return Response(ResultDetailSerializer(measurement).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = ResultDetailUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        measurement = services.update_result_detail(pk, **serializer.validated_data)
        return Response(ResultDetailSerializer(measurement).data)
