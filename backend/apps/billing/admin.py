from django.contrib import admin

from .models import Invoice, InvoiceDetail


class InvoiceDetailInline(admin.TabularInline):
    model = InvoiceDetail
    extra = 0
    can_delete = False
    readonly_fields = ["service_order_detail", "quantity", "amount"]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ["code", "medical_record", "total_amount", "status", "collected_by", "issued_at"]
    list_filter = ["status", "issued_at"]
    search_fields = ["code", "medical_record__code", "medical_record__patient_name"]
    # payments are settled and cancelled through the API only
    readonly_fields = [
        "code",
        "total_amount",
        "amount_received",
        "status",
        "cancelled_at",
        "created_at",
    ]
    inlines = [InvoiceDetailInline]
