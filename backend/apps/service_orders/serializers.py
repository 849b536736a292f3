from rest_framework import serializers

from apps.catalog.models import Service

from . import workflow
from .models import Paid, ServiceOrder, ServiceOrderDetail, ServiceOrderStatus
from .services import NewDetail


# ============================================================
# Read serializers
# ============================================================
class DetailServiceSerializer(serializers.ModelSerializer):
    type_name = serializers.CharField(read_only=True)

    class Meta:
        model = Service
        fields = ["id", "code", "name", "unit", "type_name", "execution_room_id"]


class ServiceOrderDetailSerializer(serializers.ModelSerializer):
    service = DetailServiceSerializer(read_only=True)
    payment_state = serializers.SerializerMethodField()
    has_result = serializers.BooleanField(read_only=True)

    class Meta:
        model = ServiceOrderDetail
        fields = [
            "id",
            "order_id",
            "service",
            "quantity",
            "unit_price",
            "amount",
            "require_result",
            "is_paid",
            "payment_state",
            "has_result",
        ]

    def get_payment_state(self, obj):
        state = obj.payment_state
        if isinstance(state, Paid):
            return {"state": "paid", "invoice_detail_id": state.invoice_detail_id}
        return {"state": "unpaid", "invoice_detail_id": None}


class ServiceOrderSerializer(serializers.ModelSerializer):
    """
    Order header plus workflow flags.

    The list endpoint annotates the flags in SQL; a single fetched order
    computes them through apps.service_orders.workflow.
    """
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    medical_record = serializers.SerializerMethodField()
    ordered_by = serializers.SerializerMethodField()
    flags = serializers.SerializerMethodField()

    class Meta:
        model = ServiceOrder
        fields = [
            "id",
            "code",
            "created_at",
            "status",
            "status_label",
            "medical_record",
            "ordered_by",
            "flags",
        ]

    def get_medical_record(self, obj):
        record = obj.medical_record
        return {"id": record.id, "code": record.code, "patient_name": record.patient_name}

    def get_ordered_by(self, obj):
        employee = obj.ordered_by
        if employee is None:
            return None
        return {"id": employee.id, "code": employee.code, "full_name": employee.full_name}

    def get_flags(self, obj):
        if hasattr(obj, "has_unpaid_services"):
            return {
                "has_unpaid_services": obj.has_unpaid_services,
                "all_results_completed": obj.all_results_completed,
                "is_executing": workflow.is_executing(obj),
                "has_saved_results": obj.has_saved_results,
                "can_delete": workflow.can_delete_service_order(obj.status),
                "detail_count": obj.detail_count,
                "total_amount": f"{obj.total_amount or 0:.2f}",
            }
        flags = workflow.order_flags(obj)
        return {
            "has_unpaid_services": flags.has_unpaid_services,
            "all_results_completed": flags.all_results_completed,
            "is_executing": flags.is_executing,
            "has_saved_results": flags.has_saved_results,
            "can_delete": flags.can_delete,
        }


# ============================================================
# Input serializers
# ============================================================
class NewDetailSerializer(serializers.Serializer):
    service_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    require_result = serializers.BooleanField(required=False, allow_null=True, default=None)

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        return NewDetail(**values)


class ServiceOrderCreateSerializer(serializers.Serializer):
    medical_record_id = serializers.IntegerField()
    ordered_by_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(
        choices=ServiceOrderStatus.choices[:2],
        default=ServiceOrderStatus.NOT_SENT.value,
    )
    created_at = serializers.DateTimeField(required=False, allow_null=True, default=None)
    code = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")
    details = NewDetailSerializer(many=True, required=False, default=list)


class DetailCreateSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    service_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    require_result = serializers.BooleanField(required=False, allow_null=True, default=None)


class DetailUpdateSerializer(serializers.Serializer):
    service_id = serializers.IntegerField(required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)
    require_result = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No data to update")
        return attrs


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ServiceOrderStatus.choices)


class ServiceOrderFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    medical_record_id = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=ServiceOrderStatus.choices, required=False)
    status_group = serializers.ChoiceField(
        choices=list(workflow.STATUS_GROUPS), required=False, default="all"
    )
    created_from = serializers.DateTimeField(required=False)
    created_to = serializers.DateTimeField(required=False)
    service_type = serializers.CharField(required=False, allow_blank=True)

    def to_filter(self) -> workflow.ServiceOrderFilter:
        return workflow.ServiceOrderFilter(**self.validated_data)
