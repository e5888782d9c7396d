from django.contrib import admin

from .models import CalculationHistory, Quotation


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ("id", "pol", "pod", "destination_name", "carrier", "cost_total", "selling_price", "profit", "profit_rate", "created_by", "created_at")
    search_fields = ("pol", "pod", "destination_name", "carrier", "created_by__username")
    list_filter = ("created_at",)
    readonly_fields = ("profit", "profit_rate", "created_at", "updated_at")
    date_hierarchy = "created_at"


@admin.register(CalculationHistory)
class CalculationHistoryAdmin(admin.ModelAdmin):
    list_display = ("id", "created_by", "query_date", "created_at")
    list_filter = ("query_date",)
    search_fields = ("created_by__username",)
    readonly_fields = ("input", "result", "query_date", "created_at")
