"""
PATH: inventory/api/views/settings.py

GET   /api/inventory/settings/
PATCH /api/inventory/settings/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from inventory.api.serializers import InventorySettingsSerializer, InventorySettingsUpdateSerializer
from inventory.services.settings_service import get_inventory_settings, update_inventory_settings
from tenants.api.views import TenantAPIView
from tenants.models import Module


class InventorySettingsView(TenantAPIView):
    required_module = Module.INVENTORY
    serializer_class = InventorySettingsUpdateSerializer

    @extend_schema(tags=["inventory"], responses=InventorySettingsSerializer)
    def get(self, request):
        obj = get_inventory_settings(tenant_id=self.tenant_id)
        return Response(InventorySettingsSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=InventorySettingsUpdateSerializer, responses=InventorySettingsSerializer)
    def patch(self, request):
        s = InventorySettingsUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        obj = update_inventory_settings(tenant_id=self.tenant_id, **s.validated_data)
        return Response(InventorySettingsSerializer(obj).data, status=status.HTTP_200_OK)
