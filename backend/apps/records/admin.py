from django.contrib import admin

from .models import MedicalRecord


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ["code", "patient_name", "opened_at", "status"]
    list_filter = ["status"]
    search_fields = ["code", "patient_name"]
