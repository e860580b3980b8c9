# inventory/api/serializers/settings.py

from rest_framework import serializers

from inventory.models import InventorySettings, MoveType, PurchaseStockRecognition


class InventorySettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventorySettings
        fields = [
            "purchase_stock_recognition",
            "auto_post_receipts",
            "negative_stock_move_types",
            "post_stock_valuation",
            "updated_at",
        ]
        read_only_fields = fields


class InventorySettingsUpdateSerializer(serializers.Serializer):
    purchase_stock_recognition = serializers.ChoiceField(choices=PurchaseStockRecognition.choices, required=False)
    auto_post_receipts = serializers.BooleanField(required=False)
    negative_stock_move_types = serializers.ListField(
        child=serializers.ChoiceField(choices=MoveType.choices),
        required=False,
        allow_empty=True,
    )
    post_stock_valuation = serializers.BooleanField(required=False)
