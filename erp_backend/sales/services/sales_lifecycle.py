"""
ORDER-TO-CASH LIFECYCLE RULES

This module defines the ONLY allowed lifecycle transitions
for quotations, sales orders, sales invoices and credit notes.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from core.lifecycle import build_lifecycle
from sales.models import CreditNoteStatus, InvoiceStatus, QuotationStatus, SalesOrderStatus

# ============================================================
# QUOTATION
# ============================================================

QUOTATION = build_lifecycle(
    "Quotation",
    {
        QuotationStatus.DRAFT: {QuotationStatus.SENT, QuotationStatus.CANCELLED},
        QuotationStatus.SENT: {
            QuotationStatus.ACCEPTED,
            QuotationStatus.REJECTED,
            QuotationStatus.EXPIRED,
            QuotationStatus.CANCELLED,
        },
    },
    terminal={
        QuotationStatus.ACCEPTED,
        QuotationStatus.REJECTED,
        QuotationStatus.EXPIRED,
        QuotationStatus.CANCELLED,
    },
)

# ============================================================
# SALES ORDER
# ============================================================

SALES_ORDER = build_lifecycle(
    "Sales order",
    {
        SalesOrderStatus.DRAFT: {SalesOrderStatus.CONFIRMED, SalesOrderStatus.CANCELLED},
        SalesOrderStatus.CONFIRMED: {SalesOrderStatus.FULFILLED, SalesOrderStatus.CANCELLED},
    },
    terminal={SalesOrderStatus.FULFILLED, SalesOrderStatus.CANCELLED},
)

# ============================================================
# SALES INVOICE
# ============================================================

SALES_INVOICE = build_lifecycle(
    "Sales invoice",
    {
        InvoiceStatus.DRAFT: {InvoiceStatus.POSTED, InvoiceStatus.CANCELLED},
        InvoiceStatus.POSTED: {InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID},
        InvoiceStatus.PARTIALLY_PAID: {InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID},
    },
    terminal={InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
)

RECEIVABLE_STATUSES = (InvoiceStatus.POSTED, InvoiceStatus.PARTIALLY_PAID)
POSTED_INVOICE_STATUSES = (InvoiceStatus.POSTED, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID)

# ============================================================
# CREDIT NOTE
# ============================================================

CREDIT_NOTE = build_lifecycle(
    "Credit note",
    {
        CreditNoteStatus.DRAFT: {CreditNoteStatus.POSTED, CreditNoteStatus.CANCELLED},
    },
    terminal={CreditNoteStatus.POSTED, CreditNoteStatus.CANCELLED},
)
