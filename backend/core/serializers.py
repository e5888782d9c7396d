from rest_framework import serializers

from .models import Destination, Port, RailAgent, ShippingLine, TruckAgent


class PortSerializer(serializers.ModelSerializer):
    class Meta:
        model = Port
        fields = ["id", "code", "name", "country", "port_type", "description", "created_at"]
        read_only_fields = ["created_at"]


class DestinationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Destination
        fields = ["id", "code", "name", "province", "city", "description", "created_at"]
        read_only_fields = ["created_at"]


class RailAgentSerializer(serializers.ModelSerializer):
    class Meta:
        model = RailAgent
        fields = ["id", "name", "code", "description", "created_at"]
        read_only_fields = ["created_at"]


class TruckAgentSerializer(serializers.ModelSerializer):
    class Meta:
        model = TruckAgent
        fields = ["id", "name", "code", "description", "created_at"]
        read_only_fields = ["created_at"]


class ShippingLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingLine
        fields = ["id", "name", "code", "description", "created_at"]
        read_only_fields = ["created_at"]
