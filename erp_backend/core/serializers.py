# core/serializers.py

"""
Serializers shared by every commercial document API (purchases, sales).

Input serializers validate shape only; business rules (positive quantities,
tenant-owned products, lifecycle) are enforced again in services.
"""

from rest_framework import serializers

from core.documents import PaymentMethod

DOCUMENT_FIELDS = [
    "id",
    "number",
    "status",
    "date",
    "notes",
    "subtotal",
    "tax_rate",
    "tax_amount",
    "total",
    "lines",
    "created_at",
    "updated_at",
]


class DocumentLineSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="product.sku", read_only=True, default=None)

    class Meta:
        fields = ["id", "product", "sku", "description", "quantity", "unit_price", "amount"]
        read_only_fields = fields


def line_serializer_for(line_model):
    """ModelSerializer over a concrete DocumentLine subclass."""

    class Meta(DocumentLineSerializer.Meta):
        model = line_model

    return type(f"{line_model.__name__}Serializer", (DocumentLineSerializer,), {"Meta": Meta})


class DocumentLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)

    def validate(self, attrs):
        if not attrs.get("product_id") and not (attrs.get("description") or "").strip():
            raise serializers.ValidationError("Either product_id or description is required")
        return attrs


class DocumentCreateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    tax_rate = serializers.DecimalField(max_digits=7, decimal_places=4, required=False, default=0, min_value=0)
    lines = DocumentLineInputSerializer(many=True, allow_empty=False)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    date = serializers.DateField(required=False)
    memo = serializers.CharField(required=False, allow_blank=True, default="")


PAYMENT_FIELDS = ["id", "date", "amount", "method", "memo", "journal_entry", "created_at"]
