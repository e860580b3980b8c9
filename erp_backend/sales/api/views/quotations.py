# sales/api/views/quotations.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from sales.api.serializers import (
    ExpireQuotationsSerializer,
    QuotationCreateSerializer,
    QuotationSerializer,
    SalesOrderSerializer,
)
from sales.api.views.base import SalesAPIView
from sales.models import Quotation
from sales.services import order_service, quotation_service
from tenants.api.views import TenantReadOnlyViewSet
from tenants.models import Module


class QuotationCreateView(SalesAPIView):
    serializer_class = QuotationCreateSerializer

    @extend_schema(tags=["sales"], request=QuotationCreateSerializer, responses={201: QuotationSerializer})
    def post(self, request):
        s = QuotationCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        quotation = quotation_service.create_quotation(
            tenant_id=self.tenant_id,
            lines=[dict(line) for line in data["lines"]],
            customer_id=data.get("customer_id"),
            date=data.get("date"),
            valid_until=data.get("valid_until"),
            notes=data.get("notes", ""),
            tax_rate=data.get("tax_rate", 0),
        )
        quotation = quotation_service.get_quotation(tenant_id=self.tenant_id, quotation_id=quotation.id)
        return Response(QuotationSerializer(quotation).data, status=status.HTTP_201_CREATED)


class QuotationActionView(SalesAPIView):
    """POST quotations/<id>/{send,accept,reject,cancel}/"""

    handlers = {
        "send": quotation_service.send_quotation,
        "accept": quotation_service.accept_quotation,
        "reject": quotation_service.reject_quotation,
        "cancel": quotation_service.cancel_quotation,
    }
    action_name: str = ""

    @extend_schema(tags=["sales"], request=None, responses=QuotationSerializer)
    def post(self, request, quotation_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, quotation_id=quotation_id)
        quotation = quotation_service.get_quotation(tenant_id=self.tenant_id, quotation_id=quotation_id)
        return Response(QuotationSerializer(quotation).data, status=status.HTTP_200_OK)


class QuotationConvertView(SalesAPIView):
    @extend_schema(tags=["sales"], request=None, responses={201: SalesOrderSerializer})
    def post(self, request, quotation_id):
        order = quotation_service.convert_quotation_to_order(tenant_id=self.tenant_id, quotation_id=quotation_id)
        order = order_service.get_sales_order(tenant_id=self.tenant_id, sales_order_id=order.id)
        return Response(SalesOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class QuotationExpireView(SalesAPIView):
    serializer_class = ExpireQuotationsSerializer

    @extend_schema(tags=["sales"], request=ExpireQuotationsSerializer)
    def post(self, request):
        s = ExpireQuotationsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        numbers = quotation_service.expire_quotations(tenant_id=self.tenant_id, as_of=s.validated_data.get("as_of"))
        return Response({"expired": numbers, "count": len(numbers)}, status=status.HTTP_200_OK)


@extend_schema(tags=["sales"])
class QuotationViewSet(TenantReadOnlyViewSet):
    required_module = Module.SALES
    serializer_class = QuotationSerializer
    queryset = Quotation.objects.select_related("customer").prefetch_related("lines__product").order_by(
        "-date", "-created_at"
    )
    filterset_fields = ["status", "customer", "date"]
