from __future__ import annotations

from rest_framework import serializers

from .models import CalculationHistory, Quotation


class QuotationSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = Quotation
        fields = [
            "id", "created_by", "username",
            "pol", "pod", "destination_name",
            "breakdown", "input", "excluded_costs",
            "cost_total", "selling_price", "profit", "profit_rate",
            "carrier", "notes", "created_at", "updated_at",
        ]
        # profit columns are derived in Quotation.save()
        read_only_fields = ("created_by", "profit", "profit_rate", "created_at", "updated_at")

    def validate_selling_price(self, value):
        if value < 0:
            raise serializers.ValidationError("selling_price cannot be negative.")
        return value


class CalculationHistorySerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = CalculationHistory
        fields = ["id", "created_by", "username", "input", "result", "query_date", "created_at"]
        read_only_fields = fields
