"""
PATH: sales/api/views/invoices.py

INVOICING API

POST /api/sales/invoices/create/                 direct invoice (DRAFT)
POST /api/sales/invoices/<id>/{post,cancel}/
GET/POST /api/sales/invoices/<id>/payments/
POST /api/sales/credit-notes/create/             {"invoice_id", "lines"?}
POST /api/sales/credit-notes/<id>/{post,cancel}/
GET  /api/sales/invoices/, /api/sales/credit-notes/  read-only (router)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from sales.api.serializers import (
    CreditNoteCreateSerializer,
    CreditNoteSerializer,
    CustomerPaymentCreateSerializer,
    CustomerPaymentSerializer,
    SalesInvoiceCreateSerializer,
    SalesInvoiceSerializer,
)
from sales.api.views.base import SalesAPIView
from sales.models import CreditNote, SalesInvoice
from sales.services import credit_note_service, invoice_service, payment_service
from tenants.api.views import TenantReadOnlyViewSet
from tenants.models import Module


class SalesInvoiceCreateView(SalesAPIView):
    serializer_class = SalesInvoiceCreateSerializer

    @extend_schema(tags=["sales"], request=SalesInvoiceCreateSerializer, responses={201: SalesInvoiceSerializer})
    def post(self, request):
        s = SalesInvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        invoice = invoice_service.create_sales_invoice(
            tenant_id=self.tenant_id,
            lines=[dict(line) for line in data["lines"]],
            customer_id=data.get("customer_id"),
            date=data.get("date"),
            due_date=data.get("due_date"),
            tax_rate=data.get("tax_rate", 0),
            notes=data.get("notes", ""),
        )
        invoice = invoice_service.get_sales_invoice(tenant_id=self.tenant_id, invoice_id=invoice.id)
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class SalesInvoiceActionView(SalesAPIView):
    """POST invoices/<id>/{post,cancel}/"""

    handlers = {
        "post": invoice_service.post_sales_invoice,
        "cancel": invoice_service.cancel_sales_invoice,
    }
    action_name: str = ""

    @extend_schema(tags=["sales"], request=None, responses=SalesInvoiceSerializer)
    def post(self, request, invoice_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, invoice_id=invoice_id)
        invoice = invoice_service.get_sales_invoice(tenant_id=self.tenant_id, invoice_id=invoice_id)
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class CustomerPaymentListCreateView(SalesAPIView):
    serializer_class = CustomerPaymentCreateSerializer

    @extend_schema(tags=["sales"], responses=CustomerPaymentSerializer(many=True))
    def get(self, request, invoice_id):
        invoice_service.get_sales_invoice(tenant_id=self.tenant_id, invoice_id=invoice_id)
        qs = payment_service.list_customer_payments(tenant_id=self.tenant_id, invoice_id=invoice_id)
        return Response(CustomerPaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["sales"], request=CustomerPaymentCreateSerializer, responses={201: CustomerPaymentSerializer}
    )
    def post(self, request, invoice_id):
        s = CustomerPaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        payment = payment_service.record_customer_payment(
            tenant_id=self.tenant_id,
            invoice_id=invoice_id,
            amount=data["amount"],
            method=data["method"],
            date=data.get("date"),
            memo=data.get("memo", ""),
        )
        return Response(CustomerPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["sales"])
class SalesInvoiceViewSet(TenantReadOnlyViewSet):
    required_module = Module.SALES
    serializer_class = SalesInvoiceSerializer
    queryset = (
        SalesInvoice.objects.select_related("customer")
        .prefetch_related("lines__product", "payments")
        .order_by("-date", "-created_at")
    )
    filterset_fields = ["status", "customer", "sales_order", "date", "due_date"]


class CreditNoteCreateView(SalesAPIView):
    serializer_class = CreditNoteCreateSerializer

    @extend_schema(tags=["sales"], request=CreditNoteCreateSerializer, responses={201: CreditNoteSerializer})
    def post(self, request):
        s = CreditNoteCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        lines = data.get("lines")
        credit_note = credit_note_service.create_credit_note(
            tenant_id=self.tenant_id,
            invoice_id=data["invoice_id"],
            lines=[dict(line) for line in lines] if lines is not None else None,
            date=data.get("date"),
            notes=data.get("notes", ""),
        )
        credit_note = credit_note_service.get_credit_note(tenant_id=self.tenant_id, credit_note_id=credit_note.id)
        return Response(CreditNoteSerializer(credit_note).data, status=status.HTTP_201_CREATED)


class CreditNoteActionView(SalesAPIView):
    """POST credit-notes/<id>/{post,cancel}/"""

    handlers = {
        "post": credit_note_service.post_credit_note,
        "cancel": credit_note_service.cancel_credit_note,
    }
    action_name: str = ""

    @extend_schema(tags=["sales"], request=None, responses=CreditNoteSerializer)
    def post(self, request, credit_note_id):
        self.handlers[self.action_name](tenant_id=self.tenant_id, credit_note_id=credit_note_id)
        credit_note = credit_note_service.get_credit_note(tenant_id=self.tenant_id, credit_note_id=credit_note_id)
        return Response(CreditNoteSerializer(credit_note).data, status=status.HTTP_200_OK)


@extend_schema(tags=["sales"])
class CreditNoteViewSet(TenantReadOnlyViewSet):
    required_module = Module.SALES
    serializer_class = CreditNoteSerializer
    queryset = CreditNote.objects.prefetch_related("lines__product").order_by("-date", "-created_at")
    filterset_fields = ["status", "invoice", "date"]
