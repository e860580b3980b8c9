from inventory.api.serializers.products import ProductCreateSerializer, ProductSerializer, ProductUpdateSerializer
from inventory.api.serializers.settings import InventorySettingsSerializer, InventorySettingsUpdateSerializer
from inventory.api.serializers.stock import (
    StockBalanceSerializer,
    StockMoveCreateSerializer,
    StockMoveLineSerializer,
    StockMoveSerializer,
)
from inventory.api.serializers.warehouses import (
    LocationCreateSerializer,
    LocationSerializer,
    WarehouseCreateSerializer,
    WarehouseSerializer,
)

__all__ = [
    "ProductSerializer",
    "ProductCreateSerializer",
    "ProductUpdateSerializer",
    "WarehouseSerializer",
    "WarehouseCreateSerializer",
    "LocationSerializer",
    "LocationCreateSerializer",
    "InventorySettingsSerializer",
    "InventorySettingsUpdateSerializer",
    "StockMoveSerializer",
    "StockMoveLineSerializer",
    "StockMoveCreateSerializer",
    "StockBalanceSerializer",
]
