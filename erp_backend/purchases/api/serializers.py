# purchases/api/serializers.py

from rest_framework import serializers

from core.serializers import (
    DOCUMENT_FIELDS,
    PAYMENT_FIELDS,
    DocumentCreateSerializer,
    PaymentCreateSerializer,
    line_serializer_for,
)
from purchases.models import (
    GoodsReceipt,
    GoodsReceiptLine,
    PurchaseOrder,
    PurchaseOrderLine,
    Requisition,
    RequisitionLine,
    Vendor,
    VendorBill,
    VendorBillLine,
    VendorPayment,
)


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = ["id", "name", "phone", "email", "address", "is_active", "created_at"]
        read_only_fields = ("id", "is_active", "created_at")


# ============================================================
# REQUISITIONS
# ============================================================


class RequisitionSerializer(serializers.ModelSerializer):
    lines = line_serializer_for(RequisitionLine)(many=True, read_only=True)
    purchase_order = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Requisition
        fields = DOCUMENT_FIELDS + ["requested_by", "submitted_at", "decided_at", "purchase_order"]
        read_only_fields = fields


class RequisitionCreateSerializer(DocumentCreateSerializer):
    pass


class ConvertRequisitionSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField(required=False, allow_null=True)


# ============================================================
# PURCHASE ORDERS
# ============================================================


class PurchaseOrderLineSerializer(line_serializer_for(PurchaseOrderLine)):
    open_quantity = serializers.DecimalField(max_digits=14, decimal_places=3, read_only=True)

    class Meta:
        model = PurchaseOrderLine
        fields = [
            "id",
            "product",
            "sku",
            "description",
            "quantity",
            "received_quantity",
            "open_quantity",
            "unit_price",
            "amount",
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    lines = PurchaseOrderLineSerializer(many=True, read_only=True)
    vendor_name = serializers.CharField(source="vendor.name", read_only=True, default=None)

    class Meta:
        model = PurchaseOrder
        fields = DOCUMENT_FIELDS + ["vendor", "vendor_name", "requisition", "expected_date", "confirmed_at"]
        read_only_fields = fields


class PurchaseOrderCreateSerializer(DocumentCreateSerializer):
    vendor_id = serializers.UUIDField(required=False, allow_null=True)
    expected_date = serializers.DateField(required=False, allow_null=True)


# ============================================================
# GOODS RECEIPTS
# ============================================================


class GoodsReceiptLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = GoodsReceiptLine
        fields = ["id", "order_line", "product", "location", "quantity"]
        read_only_fields = fields


class GoodsReceiptSerializer(serializers.ModelSerializer):
    lines = GoodsReceiptLineSerializer(many=True, read_only=True)

    class Meta:
        model = GoodsReceipt
        fields = ["id", "number", "date", "notes", "purchase_order", "stock_move", "lines", "created_at"]
        read_only_fields = fields


class GoodsReceiptLineInputSerializer(serializers.Serializer):
    order_line_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    location_id = serializers.UUIDField(required=False, allow_null=True)


class GoodsReceiptCreateSerializer(serializers.Serializer):
    """Omit `lines` to receive every open quantity."""

    date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = GoodsReceiptLineInputSerializer(many=True, required=False, allow_empty=False)


# ============================================================
# VENDOR BILLS + PAYMENTS
# ============================================================


class VendorPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = VendorPayment
        fields = PAYMENT_FIELDS + ["bill"]
        read_only_fields = fields


class VendorBillSerializer(serializers.ModelSerializer):
    lines = line_serializer_for(VendorBillLine)(many=True, read_only=True)
    payments = VendorPaymentSerializer(many=True, read_only=True)
    vendor_name = serializers.CharField(source="vendor.name", read_only=True, default=None)
    outstanding = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = VendorBill
        fields = DOCUMENT_FIELDS + [
            "vendor",
            "vendor_name",
            "purchase_order",
            "due_date",
            "paid_amount",
            "outstanding",
            "posted_at",
            "journal_entry",
            "stock_move",
            "payments",
        ]
        read_only_fields = fields


class VendorBillCreateSerializer(DocumentCreateSerializer):
    vendor_id = serializers.UUIDField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)


class BillFromOrderSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)


class VendorPaymentCreateSerializer(PaymentCreateSerializer):
    pass
