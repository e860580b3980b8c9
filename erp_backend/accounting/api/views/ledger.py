"""
PATH: accounting/api/views/ledger.py

GENERAL LEDGER API (READ-ONLY)

GET /api/accounting/ledger/?account_id=&fiscal_year_id=&start_date=&end_date=
GET /api/accounting/accounts/<id>/balance/?fiscal_year_id=&start_date=&end_date=
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.services.ledger_service import get_account_balance, get_ledger
from core.query_params import parse_date_param, parse_int_param
from tenants.api.views import TenantAPIView
from tenants.models import Module

LEDGER_PARAMETERS = [
    OpenApiParameter(name="fiscal_year_id", type=int, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, required=False),
]


class LedgerView(TenantAPIView):
    required_module = Module.ACCOUNTING

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="account_id", type=int, location=OpenApiParameter.QUERY, required=False),
            *LEDGER_PARAMETERS,
        ],
        responses={200: dict},
    )
    def get(self, request):
        data = get_ledger(
            tenant_id=self.tenant_id,
            account_id=parse_int_param(request, "account_id"),
            fiscal_year_id=parse_int_param(request, "fiscal_year_id"),
            start_date=parse_date_param(request, "start_date"),
            end_date=parse_date_param(request, "end_date"),
        )
        return Response({"accounts": data}, status=status.HTTP_200_OK)


class AccountBalanceView(TenantAPIView):
    required_module = Module.ACCOUNTING

    @extend_schema(tags=["accounting"], parameters=LEDGER_PARAMETERS, responses={200: dict})
    def get(self, request, account_id: int):
        balance = get_account_balance(
            tenant_id=self.tenant_id,
            account_id=account_id,
            fiscal_year_id=parse_int_param(request, "fiscal_year_id"),
            start_date=parse_date_param(request, "start_date"),
            end_date=parse_date_param(request, "end_date"),
        )
        return Response({"account_id": account_id, "balance": balance}, status=status.HTTP_200_OK)
