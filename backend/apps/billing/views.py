"""
Billing views.
"""

import time

import structlog
from prometheus_client import Counter, Histogram
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.response import Response

from apps.core.exceptions import BaseAppException

from . import services, settlement
from .serializers import (
    BillingSummarySerializer,
    InvoiceFilterSerializer,
    InvoiceSerializer,
    PaymentSummarySerializer,
    SettleSerializer,
)

logger = structlog.get_logger(__name__)

# Prometheus metrics
SETTLEMENT_TOTAL = Counter(
    "settlement_total",
    "Settlement attempts",
    ["status"],  # success, or the error code that stopped it
)
SETTLEMENT_DURATION = Histogram(
    "settlement_duration_seconds",
    "Time spent settling an invoice",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
INVOICE_CANCEL_TOTAL = Counter(
    "invoice_cancel_total",
    "Invoice cancellation attempts",
    ["status"],
)


class InvoiceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    list:     GET  /api/invoices/?medical_record_id=1&status=0
    retrieve: GET  /api/invoices/{id}/
    pay:      POST /api/invoices/pay/
    cancel:   POST /api/invoices/{id}/cancel/
    """
    serializer_class = InvoiceSerializer
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        filters = InvoiceFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return services.list_invoices(filters.to_filter())

    def get_object(self):
        return services.get_invoice(self.kwargs["pk"])

    @action(detail=False, methods=["post"])
    def pay(self, request):
        """
        Pay the selected service order details with one invoice.

        Body: {"medical_record_id", "collector_id", "amount_received",
               "detail_ids": [...], "invoice_date" (optional)}
        Returns {"invoice": {...}, "payment": {"total", "received", "change"}}.
        """
        start_time = time.time()

        serializer = SettleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            outcome = settlement.settle(
                medical_record_id=data["medical_record_id"],
                collector_id=data["collector_id"],
                amount_received=data["amount_received"],
                detail_ids=data["detail_ids"],
                invoice_date=data["invoice_date"],
            )
        except BaseAppException as exc:
            SETTLEMENT_TOTAL.labels(status=exc.code.lower()).inc()
            logger.warning(
                "settlement_rejected",
                medical_record_id=data["medical_record_id"],
                detail_ids=data["detail_ids"],
                code=exc.code,
            )
            raise
        finally:
            SETTLEMENT_DURATION.observe(time.time() - start_time)

        SETTLEMENT_TOTAL.labels(status="success").inc()

        invoice = services.get_invoice(outcome.invoice.id)
        return Response(
            {
                "invoice": InvoiceSerializer(invoice).data,
                "payment": PaymentSummarySerializer(outcome.payment).data,
                "promoted_order_ids": outcome.promoted_order_ids,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        try:
            settlement.cancel(pk)
        except BaseAppException as exc:
            INVOICE_CANCEL_TOTAL.labels(status=exc.code.lower()).inc()
            raise

        INVOICE_CANCEL_TOTAL.labels(status="success").inc()
        return Response(InvoiceSerializer(services.get_invoice(pk)).data)


@api_view(["GET"])
def billing_summary(request, medical_record_id):
    """GET /api/medical-records/{id}/billing-summary/"""
    summary = services.billing_summary(medical_record_id)
    return Response(BillingSummarySerializer(summary).data)
