# sales/admin.py

"""
Sales admin. Customers and leads are editable master data; commercial
documents are browse-only and change state through sales/services.
"""

from django.contrib import admin

from sales.models import (
    CreditNote,
    CreditNoteLine,
    Customer,
    CustomerPayment,
    Lead,
    Quotation,
    QuotationLine,
    SalesInvoice,
    SalesInvoiceLine,
    SalesOrder,
    SalesOrderLine,
)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "company", "email", "is_active")
    list_filter = ("is_active", "tenant")
    search_fields = ("name", "email", "company")


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "company", "source", "status", "expected_revenue", "customer")
    list_filter = ("status", "source", "tenant")
    search_fields = ("name", "email", "company")
    readonly_fields = ("status", "customer", "converted_at", "created_at", "updated_at")


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


class QuotationLineInline(ReadOnlyInline):
    model = QuotationLine


class SalesOrderLineInline(ReadOnlyInline):
    model = SalesOrderLine


class SalesInvoiceLineInline(ReadOnlyInline):
    model = SalesInvoiceLine


class CustomerPaymentInline(ReadOnlyInline):
    model = CustomerPayment
    fields = ("date", "amount", "method", "journal_entry")
    readonly_fields = fields


class CreditNoteLineInline(ReadOnlyInline):
    model = CreditNoteLine


@admin.register(Quotation)
class QuotationAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "customer", "date", "valid_until", "status", "total")
    inlines = [QuotationLineInline]


@admin.register(SalesOrder)
class SalesOrderAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "customer", "date", "status", "total")
    inlines = [SalesOrderLineInline]


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "customer", "date", "due_date", "status", "total", "paid_amount", "credited_amount")
    inlines = [SalesInvoiceLineInline, CustomerPaymentInline]


@admin.register(CreditNote)
class CreditNoteAdmin(ReadOnlyDocumentAdmin):
    list_display = ("number", "tenant", "invoice", "date", "status", "total")
    inlines = [CreditNoteLineInline]
