# sales/api/serializers/documents.py

from rest_framework import serializers

from core.serializers import (
    DOCUMENT_FIELDS,
    PAYMENT_FIELDS,
    DocumentCreateSerializer,
    DocumentLineInputSerializer,
    PaymentCreateSerializer,
    line_serializer_for,
)
from sales.models import (
    CreditNote,
    CreditNoteLine,
    CustomerPayment,
    Quotation,
    QuotationLine,
    SalesInvoice,
    SalesInvoiceLine,
    SalesOrder,
    SalesOrderLine,
)


class QuotationSerializer(serializers.ModelSerializer):
    lines = line_serializer_for(QuotationLine)(many=True, read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    sales_order = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Quotation
        fields = DOCUMENT_FIELDS + ["customer", "customer_name", "valid_until", "sent_at", "decided_at", "sales_order"]
        read_only_fields = fields


class QuotationCreateSerializer(DocumentCreateSerializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    valid_until = serializers.DateField(required=False, allow_null=True)


class ExpireQuotationsSerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)


class SalesOrderSerializer(serializers.ModelSerializer):
    lines = line_serializer_for(SalesOrderLine)(many=True, read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    invoice = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = SalesOrder
        fields = DOCUMENT_FIELDS + ["customer", "customer_name", "quotation", "confirmed_at", "invoice"]
        read_only_fields = fields


class SalesOrderCreateSerializer(DocumentCreateSerializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)


class CustomerPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerPayment
        fields = PAYMENT_FIELDS + ["invoice"]
        read_only_fields = fields


class SalesInvoiceSerializer(serializers.ModelSerializer):
    lines = line_serializer_for(SalesInvoiceLine)(many=True, read_only=True)
    payments = CustomerPaymentSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    outstanding = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = SalesInvoice
        fields = DOCUMENT_FIELDS + [
            "customer",
            "customer_name",
            "sales_order",
            "due_date",
            "paid_amount",
            "credited_amount",
            "outstanding",
            "posted_at",
            "journal_entry",
            "stock_move",
            "payments",
        ]
        read_only_fields = fields


class SalesInvoiceCreateSerializer(DocumentCreateSerializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)


class InvoiceFromOrderSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)


class CustomerPaymentCreateSerializer(PaymentCreateSerializer):
    pass


class CreditNoteSerializer(serializers.ModelSerializer):
    lines = line_serializer_for(CreditNoteLine)(many=True, read_only=True)
    signed_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = CreditNote
        fields = DOCUMENT_FIELDS + ["invoice", "customer", "signed_total", "posted_at", "journal_entry"]
        read_only_fields = fields


class CreditNoteCreateSerializer(serializers.Serializer):
    """Omit `lines` to credit the whole invoice."""

    invoice_id = serializers.UUIDField()
    date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = DocumentLineInputSerializer(many=True, required=False, allow_empty=False)
