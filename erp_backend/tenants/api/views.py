# tenants/api/views.py

"""
TENANT-SCOPED API BASE + MODULE ENDPOINTS

Every ERP endpoint derives from TenantAPIView:
- authenticated caller
- caller bound to a tenant (403 "Company context required" otherwise)
- view.required_module enabled for that tenant
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from tenants.context import resolve_tenant_id
from tenants.models import Module
from tenants.permissions import HasTenantContext, ModuleEnabled
from tenants.services.module_access import enabled_modules, is_module_enabled


class TenantAPIView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasTenantContext, ModuleEnabled]
    required_module: str | None = None

    @property
    def tenant_id(self):
        return resolve_tenant_id(self.request)


class TenantReadOnlyViewSet(ReadOnlyModelViewSet):
    """
    Read-only list/retrieve over one tenant's rows.
    Subclasses set queryset, serializer_class, required_module
    and optionally filterset_fields (django-filter).
    """

    permission_classes = [IsAuthenticated, HasTenantContext, ModuleEnabled]
    required_module: str | None = None
    http_method_names = ["get", "head", "options"]

    @property
    def tenant_id(self):
        return resolve_tenant_id(self.request)

    def get_queryset(self):
        qs = super().get_queryset()
        if getattr(self, "swagger_fake_view", False):
            return qs.none()
        return qs.filter(tenant_id=self.tenant_id)


class ModuleStatusSerializer(serializers.Serializer):
    module = serializers.CharField()
    enabled = serializers.BooleanField()


class ActiveModulesView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasTenantContext]
    serializer_class = ModuleStatusSerializer

    @extend_schema(tags=["modules"], responses=ModuleStatusSerializer(many=True))
    def get(self, request):
        tenant_id = resolve_tenant_id(request)
        enabled = set(enabled_modules(tenant_id=tenant_id))
        data = [{"module": m, "enabled": m in enabled} for m in Module.values]
        return Response(data, status=status.HTTP_200_OK)


class ModuleCheckView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasTenantContext]
    serializer_class = ModuleStatusSerializer

    @extend_schema(tags=["modules"], responses=ModuleStatusSerializer)
    def get(self, request, module: str):
        tenant_id = resolve_tenant_id(request)
        module = module.upper()
        return Response(
            {"module": module, "enabled": is_module_enabled(tenant_id=tenant_id, module=module)},
            status=status.HTTP_200_OK,
        )
