from django.contrib import admin

from pricing.models import (
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


class VersionedRateAdmin(admin.ModelAdmin):
    readonly_fields = ("version", "created_by", "created_at", "updated_at")
    list_filter = ("valid_from", "valid_to")


@admin.register(SeaFreight)
class SeaFreightAdmin(VersionedRateAdmin):
    list_display = ("id", "carrier", "pol", "pod", "rate", "local_charge", "valid_from", "valid_to", "version")
    search_fields = ("carrier", "pol", "pod", "freight_code")


@admin.register(AgentSeaFreight)
class AgentSeaFreightAdmin(VersionedRateAdmin):
    list_display = ("id", "agent", "carrier", "pol", "pod", "rate", "llocal", "valid_from", "valid_to", "version")
    search_fields = ("agent", "carrier", "pol", "pod")


@admin.register(Dthc)
class DthcAdmin(VersionedRateAdmin):
    list_display = ("id", "agent", "carrier", "pol", "pod", "amount", "valid_from", "valid_to", "version")
    search_fields = ("agent", "carrier")


@admin.register(DpCost)
class DpCostAdmin(VersionedRateAdmin):
    list_display = ("id", "port", "amount", "valid_from", "valid_to", "version")
    search_fields = ("port",)


@admin.register(CombinedFreight)
class CombinedFreightAdmin(VersionedRateAdmin):
    list_display = ("id", "agent", "pol", "pod", "destination", "rate", "valid_from", "valid_to", "version")
    search_fields = ("agent", "pol", "pod")


@admin.register(PortBorderFreight)
class PortBorderFreightAdmin(VersionedRateAdmin):
    list_display = ("id", "agent", "pol", "pod", "rate", "valid_from", "valid_to", "version")
    search_fields = ("agent",)


@admin.register(BorderDestinationFreight)
class BorderDestinationFreightAdmin(VersionedRateAdmin):
    list_display = ("id", "agent", "destination", "rate", "valid_from", "valid_to", "version")
    search_fields = ("agent",)


@admin.register(WeightSurchargeRule)
class WeightSurchargeRuleAdmin(VersionedRateAdmin):
    list_display = ("id", "agent", "min_weight", "max_weight", "surcharge", "valid_from", "valid_to", "version")
    search_fields = ("agent",)


@admin.register(FreightAuditLog)
class FreightAuditLogAdmin(admin.ModelAdmin):
    list_display = ("id", "timestamp", "username", "action", "entity_type", "entity_id", "version")
    list_filter = ("action", "entity_type")
    search_fields = ("username", "entity_id")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
