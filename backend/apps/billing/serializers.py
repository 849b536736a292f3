from rest_framework import serializers

from .models import Invoice, InvoiceDetail, InvoiceStatus
from .services import InvoiceFilter


class InvoiceLineSerializer(serializers.ModelSerializer):
    service_order_id = serializers.IntegerField(source="service_order_detail.order_id", read_only=True)
    service = serializers.SerializerMethodField()

    class Meta:
        model = InvoiceDetail
        fields = ["id", "service_order_detail_id", "service_order_id", "service", "quantity", "amount"]

    def get_service(self, obj):
        service = obj.service_order_detail.service
        return {"id": service.id, "code": service.code, "name": service.name}


class InvoiceSerializer(serializers.ModelSerializer):
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    collected_by = serializers.SerializerMethodField()
    medical_record = serializers.SerializerMethodField()
    lines = InvoiceLineSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "code",
            "issued_at",
            "total_amount",
            "amount_received",
            "status",
            "status_label",
            "collected_by",
            "medical_record",
            "cancelled_at",
            "lines",
        ]

    def get_collected_by(self, obj):
        employee = obj.collected_by
        return {"id": employee.id, "code": employee.code, "full_name": employee.full_name}

    def get_medical_record(self, obj):
        record = obj.medical_record
        return {"id": record.id, "code": record.code, "patient_name": record.patient_name}


class PaymentSummarySerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=16, decimal_places=2)
    received = serializers.DecimalField(max_digits=16, decimal_places=2)
    change = serializers.DecimalField(max_digits=16, decimal_places=2)


class SettleSerializer(serializers.Serializer):
    medical_record_id = serializers.IntegerField(min_value=1)
    collector_id = serializers.IntegerField(min_value=1)
    invoice_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    amount_received = serializers.DecimalField(max_digits=16, decimal_places=2, min_value=0)
    detail_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=True)


class BillingSummarySerializer(serializers.Serializer):
    medical_record_id = serializers.IntegerField()
    medical_record_code = serializers.CharField()
    patient_name = serializers.CharField()
    total_service_orders = serializers.IntegerField()
    total_service_details = serializers.IntegerField()
    unpaid_service_details = serializers.IntegerField()
    unpaid_amount = serializers.DecimalField(max_digits=16, decimal_places=2)
    payment_status = serializers.CharField()


class InvoiceFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    medical_record_id = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    issued_from = serializers.DateTimeField(required=False)
    issued_to = serializers.DateTimeField(required=False)

    def to_filter(self) -> InvoiceFilter:
        return InvoiceFilter(**self.validated_data)
