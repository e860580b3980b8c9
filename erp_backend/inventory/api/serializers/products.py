# inventory/api/serializers/products.py

from rest_framework import serializers

from inventory.models import Product, ProductType


class ProductSerializer(serializers.ModelSerializer):
    """
    Product read model.

    on_hand is annotated by the list view (sum of StockBalance across
    locations); it is never stored on Product.
    """

    on_hand = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "product_type",
            "unit_of_measure",
            "standard_cost",
            "sale_price",
            "is_active",
            "on_hand",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_on_hand(self, obj):
        value = getattr(obj, "on_hand", None)
        return None if value is None else str(value)


class ProductCreateSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    product_type = serializers.ChoiceField(choices=ProductType.choices, default=ProductType.STOCK)
    unit_of_measure = serializers.CharField(max_length=20, required=False, default="unit")
    standard_cost = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    sale_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value


class ProductUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    standard_cost = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    sale_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    is_active = serializers.BooleanField(required=False)
