# inventory/admin.py

"""
Inventory admin.

Stock quantities are never edited here: StockBalance rows and posted
StockMoves are read-only. Stock changes go through stock_move_service.
"""

from django.contrib import admin

from inventory.models import (
    InventorySettings,
    Location,
    Product,
    StockBalance,
    StockMove,
    StockMoveLine,
    Warehouse,
)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "tenant", "product_type", "standard_cost", "sale_price", "is_active")
    list_filter = ("product_type", "is_active", "tenant")
    search_fields = ("sku", "name")
    ordering = ("tenant", "sku")
    readonly_fields = ("created_at", "updated_at")


class LocationInline(admin.TabularInline):
    model = Location
    extra = 0
    fields = ("code", "name", "is_quarantine", "is_active")


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "tenant", "is_active")
    list_filter = ("is_active", "tenant")
    search_fields = ("code", "name")
    inlines = [LocationInline]


@admin.register(InventorySettings)
class InventorySettingsAdmin(admin.ModelAdmin):
    list_display = ("tenant", "purchase_stock_recognition", "auto_post_receipts", "post_stock_valuation")


class StockMoveLineInline(admin.TabularInline):
    model = StockMoveLine
    extra = 0
    fields = ("product", "location", "from_location", "to_location", "quantity", "unit_cost", "memo")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StockMove)
class StockMoveAdmin(admin.ModelAdmin):
    list_display = ("number", "tenant", "move_type", "date", "is_posted", "source_reference")
    list_filter = ("move_type", "is_posted", "tenant")
    search_fields = ("number", "source_reference", "memo")
    ordering = ("-date", "-created_at")
    inlines = [StockMoveLineInline]
    readonly_fields = (
        "tenant",
        "number",
        "move_type",
        "date",
        "memo",
        "source_reference",
        "is_posted",
        "posted_at",
        "journal_entry",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockBalance)
class StockBalanceAdmin(admin.ModelAdmin):
    list_display = ("product", "location", "tenant", "quantity_on_hand", "updated_at")
    list_filter = ("tenant",)
    search_fields = ("product__sku", "product__name")
    readonly_fields = ("tenant", "product", "location", "quantity_on_hand", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
