from rest_framework import serializers

from .models import Room, Service, ServiceGroup, ServiceType


class ServiceTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ServiceType
        fields = ["id", "name"]


class ServiceGroupSerializer(serializers.ModelSerializer):
    service_type = ServiceTypeSerializer(read_only=True)

    class Meta:
        model = ServiceGroup
        fields = ["id", "name", "service_type"]


class RoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = ["id", "name"]


class ServiceSerializer(serializers.ModelSerializer):
    group = ServiceGroupSerializer(read_only=True)
    type_name = serializers.CharField(read_only=True)
    execution_room = RoomSerializer(read_only=True)

    class Meta:
        model = Service
        fields = [
            "id",
            "code",
            "name",
            "unit",
            "unit_price",
            "group",
            "type_name",
            "execution_room",
            "requires_result",
            "reference_min",
            "reference_max",
        ]
