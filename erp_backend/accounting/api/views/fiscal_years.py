"""
PATH: accounting/api/views/fiscal_years.py

FISCAL YEAR API

GET  /api/accounting/fiscal-years/
POST /api/accounting/fiscal-years/
POST /api/accounting/fiscal-years/<id>/lock/
POST /api/accounting/fiscal-years/<id>/unlock/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers import FiscalYearCreateSerializer, FiscalYearSerializer
from accounting.services import fiscal_year_service
from tenants.api.views import TenantAPIView
from tenants.models import Module


class FiscalYearListCreateView(TenantAPIView):
    required_module = Module.ACCOUNTING
    serializer_class = FiscalYearCreateSerializer

    @extend_schema(tags=["accounting"], responses=FiscalYearSerializer(many=True))
    def get(self, request):
        qs = fiscal_year_service.list_fiscal_years(tenant_id=self.tenant_id)
        return Response(FiscalYearSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=FiscalYearCreateSerializer, responses={201: FiscalYearSerializer})
    def post(self, request):
        s = FiscalYearCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        fy = fiscal_year_service.create_fiscal_year(tenant_id=self.tenant_id, **s.validated_data)
        return Response(FiscalYearSerializer(fy).data, status=status.HTTP_201_CREATED)


class FiscalYearLockView(TenantAPIView):
    required_module = Module.ACCOUNTING
    lock = True

    @extend_schema(tags=["accounting"], request=None, responses=FiscalYearSerializer)
    def post(self, request, fiscal_year_id: int):
        if self.lock:
            fy = fiscal_year_service.lock_fiscal_year(tenant_id=self.tenant_id, fiscal_year_id=fiscal_year_id)
        else:
            fy = fiscal_year_service.unlock_fiscal_year(tenant_id=self.tenant_id, fiscal_year_id=fiscal_year_id)
        return Response(FiscalYearSerializer(fy).data, status=status.HTTP_200_OK)


class FiscalYearUnlockView(FiscalYearLockView):
    lock = False
