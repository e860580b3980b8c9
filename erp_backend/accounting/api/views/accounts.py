"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API

GET   /api/accounting/accounts/             list (?include_inactive=true)
POST  /api/accounting/accounts/             create
PATCH /api/accounting/accounts/<id>/        rename / re-parent / (de)activate
POST  /api/accounting/accounts/seed/        idempotent starter chart + fiscal years
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
)
from accounting.services import chart_service
from tenants.api.views import TenantAPIView
from tenants.models import Module


class AccountListCreateView(TenantAPIView):
    required_module = Module.ACCOUNTING
    serializer_class = AccountCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(
                name="include_inactive",
                type=bool,
                location=OpenApiParameter.QUERY,
                required=False,
            )
        ],
        responses=AccountSerializer(many=True),
    )
    def get(self, request):
        include_inactive = str(request.query_params.get("include_inactive", "")).lower() in ("1", "true", "yes")
        qs = chart_service.list_accounts(tenant_id=self.tenant_id, include_inactive=include_inactive)
        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountCreateSerializer, responses={201: AccountSerializer})
    def post(self, request):
        s = AccountCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        account = chart_service.create_account(tenant_id=self.tenant_id, **s.validated_data)
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountDetailView(TenantAPIView):
    required_module = Module.ACCOUNTING
    serializer_class = AccountUpdateSerializer

    @extend_schema(tags=["accounting"], responses=AccountSerializer)
    def get(self, request, account_id: int):
        account = chart_service.get_account(tenant_id=self.tenant_id, account_id=account_id)
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountUpdateSerializer, responses=AccountSerializer)
    def patch(self, request, account_id: int):
        s = AccountUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        account = chart_service.update_account(
            tenant_id=self.tenant_id, account_id=account_id, **s.validated_data
        )
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)


class SeedStarterChartView(TenantAPIView):
    required_module = Module.ACCOUNTING

    @extend_schema(tags=["accounting"], request=None, responses={200: dict})
    def post(self, request):
        result = chart_service.seed_starter_accounts(tenant_id=self.tenant_id)
        return Response(result, status=status.HTTP_200_OK)
