# purchases/admin.py

"""
Purchasing admin: browse only. Documents change state through
purchases/services, never through admin forms.
"""

from django.contrib import admin

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


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "email", "phone", "is_active")
    list_filter = ("is_active", "tenant")
    search_fields = ("name", "email")


class ReadOnlyInline(admin.TabularInline):
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class ReadOnlyDocumentAdmin(admin.ModelAdmin):
    list_display = ("number", "tenant", "date", "status", "total")
    list_filter = ("status", "tenant")
    search_fields = ("number",)
    ordering = ("-date",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class RequisitionLineInline(ReadOnlyInline):
    model = RequisitionLine


class PurchaseOrderLineInline(ReadOnlyInline):
    model = PurchaseOrderLine


class GoodsReceiptLineInline(ReadOnlyInline):
    model = GoodsReceiptLine


class VendorBillLineInline(ReadOnlyInline):
    model = VendorBillLine


class VendorPaymentInline(ReadOnlyInline):
    model = VendorPayment
    fields = ("date", "amount", "method", "journal_entry")
    readonly_fields = fields


@admin.register(Requisition)
class RequisitionAdmin(ReadOnlyDocumentAdmin):
    inlines = [RequisitionLineInline]


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "vendor", "date", "status", "total")
    inlines = [PurchaseOrderLineInline]


@admin.register(GoodsReceipt)
class GoodsReceiptAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "purchase_order", "date", "stock_move")
    list_filter = ("tenant",)
    inlines = [GoodsReceiptLineInline]


@admin.register(VendorBill)
class VendorBillAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "vendor", "date", "due_date", "status", "total", "paid_amount")
    inlines = [VendorBillLineInline, VendorPaymentInline]
