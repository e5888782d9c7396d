from __future__ import annotations

from rest_framework import serializers

from .dataclasses import CostCalculationInput, OtherCost
from .models import (
    AgentSeaFreight,
    BorderDestinationFreight,
    CombinedFreight,
    DpCost,
    Dthc,
    FreightAuditLog,
    PortBorderFreight,
    SeaFreight,
    WeightSurchargeRule,
)
from .services.adjustments import AdjustmentError, Exclusions
from .services.policy import get_calculation_policy
from .services.rate_store import UNBOUNDED_WEIGHT_SENTINEL
from .services.validity import get_validity_status

MONEY = dict(max_digits=14, decimal_places=2)
RATE_COMMON_FIELDS = ["id", "valid_from", "valid_to", "version", "created_by", "created_at", "updated_at", "validity_status"]
RATE_READ_ONLY_FIELDS = ["version", "created_by", "created_at", "updated_at"]


# ---------- CALCULATION REQUEST ----------
class OtherCostSerializer(serializers.Serializer):
    category = serializers.CharField(max_length=100)
    amount = serializers.DecimalField(**MONEY)


class CalculateRequestSerializer(serializers.Serializer):
    pol = serializers.CharField()
    pod = serializers.CharField()
    destination_id = serializers.CharField()
    weight = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    include_dp = serializers.BooleanField(required=False, default=False)
    domestic_transport = serializers.DecimalField(required=False, default=0, **MONEY)
    local_charge = serializers.DecimalField(required=False, allow_null=True, default=None, **MONEY)
    other_costs = OtherCostSerializer(many=True, required=False, default=list)
    selected_sea_freight_id = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    historical_date = serializers.DateField(required=False, allow_null=True, default=None)
    exclusions = serializers.JSONField(required=False, default=None)

    def validate_exclusions(self, value):
        if value is None:
            return None
        if not isinstance(value, dict):
            raise serializers.ValidationError("exclusions must be an object with 'global' and 'rows'.")
        try:
            return Exclusions.from_payload(value)
        except (AdjustmentError, ValueError, TypeError) as exc:
            raise serializers.ValidationError(str(exc))

    def to_input(self) -> CostCalculationInput:
        data = self.validated_data
        historical = data.get("historical_date")
        return CostCalculationInput(
            pol=data["pol"],
            pod=data["pod"],
            destination_id=str(data["destination_id"]),
            weight=data["weight"],
            include_dp=data["include_dp"],
            domestic_transport=data["domestic_transport"],
            local_charge=data.get("local_charge"),
            other_costs=[OtherCost(category=c["category"], amount=c["amount"]) for c in data["other_costs"]],
            selected_sea_freight_id=data.get("selected_sea_freight_id") or None,
            historical_date=historical.isoformat() if historical else None,
        )


# ---------- CALCULATION RESULT (read-only projections of the dataclasses) ----------
class MissingFreightSerializer(serializers.Serializer):
    type = serializers.CharField()
    route = serializers.CharField()
    message = serializers.CharField()


class BreakdownSerializer(serializers.Serializer):
    agent = serializers.CharField()
    rail_agent = serializers.CharField()
    rail_agent_code = serializers.CharField(allow_null=True)
    truck_agent = serializers.CharField()
    truck_agent_code = serializers.CharField(allow_null=True)
    sea_freight = serializers.DecimalField(**MONEY)
    local_charge = serializers.DecimalField(**MONEY)
    llocal = serializers.DecimalField(**MONEY)
    sea_freight_id = serializers.CharField(allow_null=True)
    sea_freight_carrier = serializers.CharField(allow_null=True)
    sea_freight_carrier_code = serializers.CharField(allow_null=True)
    is_agent_specific_sea_freight = serializers.BooleanField()
    dthc = serializers.DecimalField(**MONEY)
    port_border = serializers.DecimalField(**MONEY)
    border_destination = serializers.DecimalField(**MONEY)
    combined_freight = serializers.DecimalField(**MONEY)
    is_combined_freight = serializers.BooleanField()
    weight_surcharge = serializers.DecimalField(**MONEY)
    dp = serializers.DecimalField(**MONEY)
    domestic_transport = serializers.DecimalField(**MONEY)
    other_costs = OtherCostSerializer(many=True)
    total = serializers.DecimalField(**MONEY)
    has_expired_rates = serializers.BooleanField()
    expired_rate_details = serializers.ListField(child=serializers.CharField())


class CalculationResultSerializer(serializers.Serializer):
    breakdown = BreakdownSerializer(many=True)
    lowest_cost_agent = serializers.CharField(allow_blank=True)
    lowest_cost = serializers.DecimalField(**MONEY)
    is_historical = serializers.BooleanField()
    historical_date = serializers.CharField(allow_null=True)
    missing_freights = MissingFreightSerializer(many=True)


class RankedRowSerializer(serializers.Serializer):
    index = serializers.IntegerField()
    agent = serializers.CharField(source="row.agent")
    code = serializers.CharField()
    adjusted_total = serializers.DecimalField(**MONEY)


class RankedResultSerializer(serializers.Serializer):
    rows = RankedRowSerializer(many=True)
    lowest_index = serializers.IntegerField()
    lowest_agent = serializers.CharField(allow_blank=True)
    lowest_cost = serializers.DecimalField(**MONEY)
    lowest_code = serializers.CharField(allow_blank=True)


# ---------- RATE TABLES ----------
class VersionedRateSerializer(serializers.ModelSerializer):
    validity_status = serializers.SerializerMethodField(read_only=True)
    # Left out on create, the store continues the latest version for a month.
    valid_from = serializers.DateField(required=False)
    valid_to = serializers.DateField(required=False)

    def validate(self, attrs):
        valid_from = attrs.get("valid_from", getattr(self.instance, "valid_from", None))
        valid_to = attrs.get("valid_to", getattr(self.instance, "valid_to", None))
        if valid_from and valid_to and valid_to < valid_from:
            raise serializers.ValidationError({"valid_to": "valid_to cannot be earlier than valid_from."})
        return attrs

    def get_validity_status(self, obj):
        status = get_validity_status(
            obj.valid_from, obj.valid_to, expiring_days=get_calculation_policy().expiring_soon_days
        )
        return {"status": status.status, "days_until_expiry": status.days_until_expiry}


class SeaFreightSerializer(VersionedRateSerializer):
    class Meta:
        model = SeaFreight
        fields = RATE_COMMON_FIELDS + ["pol", "pod", "carrier", "rate", "local_charge", "note", "freight_code"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class AgentSeaFreightSerializer(VersionedRateSerializer):
    class Meta:
        model = AgentSeaFreight
        fields = RATE_COMMON_FIELDS + ["agent", "pol", "pod", "carrier", "rate", "local_charge", "llocal", "note"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class DthcSerializer(VersionedRateSerializer):
    class Meta:
        model = Dthc
        fields = RATE_COMMON_FIELDS + ["agent", "pol", "pod", "carrier", "amount", "description"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class DpCostSerializer(VersionedRateSerializer):
    class Meta:
        model = DpCost
        fields = RATE_COMMON_FIELDS + ["port", "amount", "description"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class CombinedFreightSerializer(VersionedRateSerializer):
    class Meta:
        model = CombinedFreight
        fields = RATE_COMMON_FIELDS + ["agent", "pol", "pod", "destination", "rate", "description"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class PortBorderFreightSerializer(VersionedRateSerializer):
    class Meta:
        model = PortBorderFreight
        fields = RATE_COMMON_FIELDS + ["agent", "pol", "pod", "rate"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class BorderDestinationFreightSerializer(VersionedRateSerializer):
    class Meta:
        model = BorderDestinationFreight
        fields = RATE_COMMON_FIELDS + ["agent", "destination", "rate"]
        read_only_fields = RATE_READ_ONLY_FIELDS


class WeightSurchargeRuleSerializer(VersionedRateSerializer):
    class Meta:
        model = WeightSurchargeRule
        fields = RATE_COMMON_FIELDS + ["agent", "min_weight", "max_weight", "surcharge"]
        read_only_fields = RATE_READ_ONLY_FIELDS

    def validate(self, attrs):
        attrs = super().validate(attrs)
        min_weight = attrs.get("min_weight", getattr(self.instance, "min_weight", None))
        max_weight = attrs.get("max_weight", getattr(self.instance, "max_weight", None))
        if max_weight is not None and max_weight >= UNBOUNDED_WEIGHT_SENTINEL:
            max_weight = None  # legacy "no upper bound" marker, stored as NULL
        if max_weight is not None and min_weight is not None and max_weight < min_weight:
            raise serializers.ValidationError({"max_weight": "max_weight cannot be below min_weight."})
        return attrs


class FreightAuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = FreightAuditLog
        fields = [
            "id", "user", "username", "action", "entity_type", "entity_id",
            "entity_snapshot", "changes", "version", "timestamp",
        ]
        read_only_fields = fields
