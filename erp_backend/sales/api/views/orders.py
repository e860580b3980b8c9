# sales/api/views/orders.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from sales.api.serializers import (
    InvoiceFromOrderSerializer,
    SalesInvoiceSerializer,
    SalesOrderCreateSerializer,
    SalesOrderSerializer,
)
from sales.api.views.base import SalesAPIView
from sales.models import SalesOrder
from sales.services import invoice_service, order_service
from tenants.api.views import TenantReadOnlyViewSet
from tenants.models import Module


class SalesOrderCreateView(SalesAPIView):
    serializer_class = SalesOrderCreateSerializer

    @extend_schema(tags=["sales"], request=SalesOrderCreateSerializer, responses={201: SalesOrderSerializer})
    def post(self, request):
        s = SalesOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        order = order_service.create_sales_order(
            tenant_id=self.tenant_id,
            lines=[dict(line) for line in data["lines"]],
            customer_id=data.get("customer_id"),
            date=data.get("date"),
            notes=data.get("notes", ""),
            tax_rate=data.get("tax_rate", 0),
        )
        order = order_service.get_sales_order(tenant_id=self.tenant_id, sales_order_id=order.id)
        return Response(SalesOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class SalesOrderActionView(SalesAPIView):
    """POST orders/<id>/{confirm,cancel}/"""

    handlers = {
        "confirm": order_service.confirm_sales_order,
        "cancel": order_service.cancel_sales_order,
    }
    action_name: str = ""

    @extend_schema(tags=["sales"], request=None, responses=SalesOrderSerializer)
    def post(self, request, sales_order_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, sales_order_id=sales_order_id)
        order = order_service.get_sales_order(tenant_id=self.tenant_id, sales_order_id=sales_order_id)
        return Response(SalesOrderSerializer(order).data, status=status.HTTP_200_OK)


class SalesOrderInvoiceView(SalesAPIView):
    serializer_class = InvoiceFromOrderSerializer

    @extend_schema(tags=["sales"], request=InvoiceFromOrderSerializer, responses={201: SalesInvoiceSerializer})
    def post(self, request, sales_order_id):
        s = InvoiceFromOrderSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        invoice = invoice_service.create_invoice_from_order(
            tenant_id=self.tenant_id,
            sales_order_id=sales_order_id,
            date=s.validated_data.get("date"),
            due_date=s.validated_data.get("due_date"),
        )
        invoice = invoice_service.get_sales_invoice(tenant_id=self.tenant_id, invoice_id=invoice.id)
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["sales"])
class SalesOrderViewSet(TenantReadOnlyViewSet):
    required_module = Module.SALES
    serializer_class = SalesOrderSerializer
    queryset = SalesOrder.objects.select_related("customer").prefetch_related("lines__product").order_by(
        "-date", "-created_at"
    )
    filterset_fields = ["status", "customer", "date"]
