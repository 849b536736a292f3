from django.contrib import admin

from .models import ServiceOrder, ServiceOrderDetail


class ServiceOrderDetailInline(admin.TabularInline):
    model = ServiceOrderDetail
    extra = 0
    readonly_fields = ["unit_price", "amount", "is_paid"]


@admin.register(ServiceOrder)
class ServiceOrderAdmin(admin.ModelAdmin):
    list_display = ["code", "medical_record", "status", "ordered_by", "created_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["code", "medical_record__code", "medical_record__patient_name"]
    # status only moves through the workflow endpoints
    readonly_fields = ["code", "status"]
    inlines = [ServiceOrderDetailInline]
    ordering = ["-created_at"]
