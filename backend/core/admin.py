from django.contrib import admin

from .models import Destination, Port, RailAgent, ShippingLine, TruckAgent


@admin.register(Port)
class PortAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "name", "country", "port_type")
    list_filter = ("port_type",)
    search_fields = ("code", "name", "country")


@admin.register(Destination)
class DestinationAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "name", "province", "city")
    search_fields = ("code", "name", "city")


class PartnerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "code")
    search_fields = ("name", "code")


admin.site.register(RailAgent, PartnerAdmin)
admin.site.register(TruckAgent, PartnerAdmin)
admin.site.register(ShippingLine, PartnerAdmin)
