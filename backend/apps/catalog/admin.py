from django.contrib import admin

from .models import Room, Service, ServiceGroup, ServiceType

admin.site.register(ServiceType)
admin.site.register(ServiceGroup)
admin.site.register(Room)


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "unit_price", "group", "requires_result"]
    list_filter = ["group__service_type", "requires_result"]
    search_fields = ["code", "name"]
