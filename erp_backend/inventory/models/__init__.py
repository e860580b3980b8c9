"""
PATH: inventory/models/__init__.py

Inventory models export surface.
"""

from inventory.models.product import Product, ProductType
from inventory.models.settings import InventorySettings, PurchaseStockRecognition
from inventory.models.stock import (
    SINGLE_LOCATION_TYPES,
    TWO_LOCATION_TYPES,
    MoveType,
    StockBalance,
    StockMove,
    StockMoveLine,
)
from inventory.models.warehouse import Location, Warehouse

__all__ = [
    "Product",
    "ProductType",
    "Warehouse",
    "Location",
    "InventorySettings",
    "PurchaseStockRecognition",
    "MoveType",
    "SINGLE_LOCATION_TYPES",
    "TWO_LOCATION_TYPES",
    "StockMove",
    "StockMoveLine",
    "StockBalance",
]
