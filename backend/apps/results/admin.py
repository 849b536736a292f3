from django.contrib import admin

from .models import Result, ResultDetail


class ResultDetailInline(admin.StackedInline):
    model = ResultDetail
    extra = 0


@admin.register(Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ["id", "detail", "received_at", "performed_at", "delivered_at"]
    search_fields = ["result_text", "conclusion", "detail__order__code", "detail__service__name"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [ResultDetailInline]
