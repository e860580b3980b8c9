# inventory/api/serializers/warehouses.py

from rest_framework import serializers

from inventory.models import Location, Warehouse


class LocationSerializer(serializers.ModelSerializer):
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = Location
        fields = ["id", "warehouse", "warehouse_code", "code", "name", "is_quarantine", "is_active", "created_at"]
        read_only_fields = fields


class WarehouseSerializer(serializers.ModelSerializer):
    locations = LocationSerializer(many=True, read_only=True)

    class Meta:
        model = Warehouse
        fields = ["id", "code", "name", "address", "is_active", "locations", "created_at"]
        read_only_fields = fields


class WarehouseCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    address = serializers.CharField(required=False, allow_blank=True, default="")


class LocationCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    is_quarantine = serializers.BooleanField(required=False, default=False)
