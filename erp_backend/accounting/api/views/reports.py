"""
PATH: accounting/api/views/reports.py

FINANCIAL REPORTS API (READ-ONLY)

GET /api/accounting/trial-balance/?fiscal_year_id=&as_of=
GET /api/accounting/profit-and-loss/?fiscal_year_id=      (required)
GET /api/accounting/balance-sheet/?as_of=
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.services.balance_sheet_service import get_balance_sheet
from accounting.services.profit_and_loss_service import get_profit_and_loss
from accounting.services.trial_balance_service import get_trial_balance
from core.errors import InvalidInputError
from core.query_params import parse_date_param, parse_int_param
from tenants.api.views import TenantAPIView
from tenants.models import Module

FISCAL_YEAR_PARAM = OpenApiParameter(
    name="fiscal_year_id", type=int, location=OpenApiParameter.QUERY, required=False
)
AS_OF_PARAM = OpenApiParameter(
    name="as_of",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Inclusive cutoff date (YYYY-MM-DD).",
)


class TrialBalanceView(TenantAPIView):
    required_module = Module.ACCOUNTING

    @extend_schema(tags=["accounting"], parameters=[FISCAL_YEAR_PARAM, AS_OF_PARAM], responses={200: dict})
    def get(self, request):
        data = get_trial_balance(
            tenant_id=self.tenant_id,
            fiscal_year_id=parse_int_param(request, "fiscal_year_id"),
            as_of=parse_date_param(request, "as_of"),
        )
        return Response(data, status=status.HTTP_200_OK)


class ProfitAndLossView(TenantAPIView):
    required_module = Module.ACCOUNTING

    @extend_schema(tags=["accounting"], parameters=[FISCAL_YEAR_PARAM], responses={200: dict})
    def get(self, request):
        fiscal_year_id = parse_int_param(request, "fiscal_year_id")
        if fiscal_year_id is None:
            raise InvalidInputError("fiscal_year_id is required")

        data = get_profit_and_loss(tenant_id=self.tenant_id, fiscal_year_id=fiscal_year_id)
        return Response(data, status=status.HTTP_200_OK)


class BalanceSheetView(TenantAPIView):
    required_module = Module.ACCOUNTING

    @extend_schema(tags=["accounting"], parameters=[AS_OF_PARAM], responses={200: dict})
    def get(self, request):
        data = get_balance_sheet(tenant_id=self.tenant_id, as_of=parse_date_param(request, "as_of"))
        return Response(data, status=status.HTTP_200_OK)
