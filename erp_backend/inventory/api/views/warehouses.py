"""
PATH: inventory/api/views/warehouses.py

GET  /api/inventory/warehouses/
POST /api/inventory/warehouses/                       (creates MAIN + QUAR locations)
POST /api/inventory/warehouses/<id>/locations/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from inventory.api.serializers import (
    LocationCreateSerializer,
    LocationSerializer,
    WarehouseCreateSerializer,
    WarehouseSerializer,
)
from inventory.services import warehouse_service
from tenants.api.views import TenantAPIView
from tenants.models import Module


class WarehouseListCreateView(TenantAPIView):
    required_module = Module.INVENTORY
    serializer_class = WarehouseCreateSerializer

    @extend_schema(tags=["inventory"], responses=WarehouseSerializer(many=True))
    def get(self, request):
        qs = warehouse_service.list_warehouses(tenant_id=self.tenant_id)
        return Response(WarehouseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=WarehouseCreateSerializer, responses={201: WarehouseSerializer})
    def post(self, request):
        s = WarehouseCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        warehouse = warehouse_service.create_warehouse(tenant_id=self.tenant_id, **s.validated_data)
        return Response(WarehouseSerializer(warehouse).data, status=status.HTTP_201_CREATED)


class LocationCreateView(TenantAPIView):
    required_module = Module.INVENTORY
    serializer_class = LocationCreateSerializer

    @extend_schema(tags=["inventory"], request=LocationCreateSerializer, responses={201: LocationSerializer})
    def post(self, request, warehouse_id):
        s = LocationCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        location = warehouse_service.create_location(
            tenant_id=self.tenant_id, warehouse_id=warehouse_id, **s.validated_data
        )
        return Response(LocationSerializer(location).data, status=status.HTTP_201_CREATED)
