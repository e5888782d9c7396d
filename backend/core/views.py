from rest_framework import viewsets

from accounts.permissions import CanManageRates

from .models import Destination, Port, RailAgent, ShippingLine, TruckAgent
from .serializers import (
    DestinationSerializer,
    PortSerializer,
    RailAgentSerializer,
    ShippingLineSerializer,
    TruckAgentSerializer,
)


class PortViewSet(viewsets.ModelViewSet):
    permission_classes = [CanManageRates]
    serializer_class = PortSerializer

    def get_queryset(self):
        qs = Port.objects.all()
        port_type = self.request.query_params.get("port_type")
        if port_type:
            qs = qs.filter(port_type=port_type.upper())
        return qs


class DestinationViewSet(viewsets.ModelViewSet):
    permission_classes = [CanManageRates]
    queryset = Destination.objects.all()
    serializer_class = DestinationSerializer


class RailAgentViewSet(viewsets.ModelViewSet):
    permission_classes = [CanManageRates]
    queryset = RailAgent.objects.all()
    serializer_class = RailAgentSerializer


class TruckAgentViewSet(viewsets.ModelViewSet):
    permission_classes = [CanManageRates]
    queryset = TruckAgent.objects.all()
    serializer_class = TruckAgentSerializer


class ShippingLineViewSet(viewsets.ModelViewSet):
    permission_classes = [CanManageRates]
    queryset = ShippingLine.objects.all()
    serializer_class = ShippingLineSerializer
