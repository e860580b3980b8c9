# inventory/api/serializers/stock.py

from rest_framework import serializers

from inventory.models import MoveType, StockBalance, StockMove, StockMoveLine


class StockMoveLineSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = StockMoveLine
        fields = [
            "id",
            "product",
            "sku",
            "location",
            "from_location",
            "to_location",
            "quantity",
            "unit_cost",
            "memo",
        ]
        read_only_fields = fields


class StockMoveSerializer(serializers.ModelSerializer):
    lines = StockMoveLineSerializer(many=True, read_only=True)

    class Meta:
        model = StockMove
        fields = [
            "id",
            "number",
            "move_type",
            "date",
            "memo",
            "source_reference",
            "is_posted",
            "posted_at",
            "journal_entry",
            "lines",
            "created_at",
        ]
        read_only_fields = fields


class StockMoveLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    location_id = serializers.UUIDField(required=False, allow_null=True)
    from_location_id = serializers.UUIDField(required=False, allow_null=True)
    to_location_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    memo = serializers.CharField(required=False, allow_blank=True, default="")


class StockMoveCreateSerializer(serializers.Serializer):
    """Shape only; location rules per move type live in stock_move_service."""

    move_type = serializers.ChoiceField(choices=MoveType.choices)
    date = serializers.DateField(required=False)
    memo = serializers.CharField(required=False, allow_blank=True, default="")
    lines = StockMoveLineInputSerializer(many=True)
    post = serializers.BooleanField(required=False, default=False)


class StockBalanceSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="product.sku", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    location_code = serializers.CharField(source="location.code", read_only=True)
    warehouse_code = serializers.CharField(source="location.warehouse.code", read_only=True)

    class Meta:
        model = StockBalance
        fields = [
            "id",
            "product",
            "sku",
            "product_name",
            "location",
            "location_code",
            "warehouse_code",
            "quantity_on_hand",
            "updated_at",
        ]
        read_only_fields = fields
