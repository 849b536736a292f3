from rest_framework import serializers

from .models import Result, ResultDetail
from .services import ResultFilter


class ResultDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = ResultDetail
        fields = ["id", "result_id", "indicator", "value", "is_abnormal"]


class ResultSerializer(serializers.ModelSerializer):
    service_order_detail = serializers.SerializerMethodField()
    measurement = serializers.SerializerMethodField()

    class Meta:
        model = Result
        fields = [
            "id",
            "received_at",
            "performed_at",
            "delivered_at",
            "result_text",
            "conclusion",
            "note",
            "url",
            "service_order_detail",
            "measurement",
        ]

    def get_service_order_detail(self, obj):
        detail = obj.detail
        return {
            "id": detail.id,
            "quantity": detail.quantity,
            "amount": str(detail.amount),
            "require_result": detail.require_result,
            "is_paid": detail.is_paid,
            "service": {
                "id": detail.service.id,
                "code": detail.service.code,
                "name": detail.service.name,
            },
            "service_order": {"id": detail.order.id, "code": detail.order.code},
        }

    def get_measurement(self, obj):
        try:
            measurement = obj.measurement
        except ResultDetail.DoesNotExist:
            return None
        return ResultDetailSerializer(measurement).data


class ResultCreateSerializer(serializers.Serializer):
    detail_id = serializers.IntegerField(min_value=1)
    received_at = serializers.DateTimeField()
    performed_at = serializers.DateTimeField()
    delivered_at = serializers.DateTimeField()
    result_text = serializers.CharField()
    conclusion = serializers.CharField()
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)
    url = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class ResultUpdateSerializer(serializers.Serializer):
    received_at = serializers.DateTimeField(required=False)
    performed_at = serializers.DateTimeField(required=False)
    delivered_at = serializers.DateTimeField(required=False)
    result_text = serializers.CharField(required=False)
    conclusion = serializers.CharField(required=False)
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)
    url = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No data to update")
        return attrs


class ResultDetailCreateSerializer(serializers.Serializer):
    result_id = serializers.IntegerField(min_value=1)
    indicator = serializers.CharField(max_length=255)
    value = serializers.CharField(max_length=255)
    is_abnormal = serializers.BooleanField(default=False)


class ResultDetailUpdateSerializer(serializers.Serializer):
    indicator = serializers.CharField(max_length=255, required=False)
    value = serializers.CharField(max_length=255, required=False)
    is_abnormal = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No data to update")
        return attrs


class ResultFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    service_order_id = serializers.IntegerField(required=False)
    detail_id = serializers.IntegerField(required=False)
    medical_record_id = serializers.IntegerField(required=False)
    service_id = serializers.IntegerField(required=False)

    def to_filter(self) -> ResultFilter:
        return ResultFilter(**self.validated_data)
