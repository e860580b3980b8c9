# inventory/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.api.views.products import ProductDetailView, ProductListCreateView
from inventory.api.views.settings import InventorySettingsView
from inventory.api.views.stock import (
    StockBalanceListView,
    StockMoveCreateView,
    StockMovePostView,
    StockMoveViewSet,
)
from inventory.api.views.warehouses import LocationCreateView, WarehouseListCreateView

router = DefaultRouter()
router.register("stock-moves", StockMoveViewSet, basename="stock-move")

urlpatterns = [
    path("stock-moves/create/", StockMoveCreateView.as_view(), name="stock-move-create"),
    path("stock-moves/<uuid:stock_move_id>/post/", StockMovePostView.as_view(), name="stock-move-post"),
    path("", include(router.urls)),
    path("products/", ProductListCreateView.as_view(), name="products"),
    path("products/<uuid:product_id>/", ProductDetailView.as_view(), name="product-detail"),
    path("warehouses/", WarehouseListCreateView.as_view(), name="warehouses"),
    path("warehouses/<uuid:warehouse_id>/locations/", LocationCreateView.as_view(), name="warehouse-locations"),
    path("stock-balances/", StockBalanceListView.as_view(), name="stock-balances"),
    path("settings/", InventorySettingsView.as_view(), name="inventory-settings"),
]
