# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Lead -> Customer; Quotation -> SalesOrder -> SalesInvoice -> CreditNote
"""

from sales.models.credit_note import CreditNote, CreditNoteLine, CreditNoteStatus
from sales.models.customer import CLOSED_LEAD_STATUSES, Customer, Lead, LeadSource, LeadStatus
from sales.models.invoice import CustomerPayment, InvoiceStatus, SalesInvoice, SalesInvoiceLine
from sales.models.quotation import Quotation, QuotationLine, QuotationStatus
from sales.models.sales_order import SalesOrder, SalesOrderLine, SalesOrderStatus

__all__ = [
    "Customer",
    "Lead",
    "LeadSource",
    "LeadStatus",
    "CLOSED_LEAD_STATUSES",
    "Quotation",
    "QuotationLine",
    "QuotationStatus",
    "SalesOrder",
    "SalesOrderLine",
    "SalesOrderStatus",
    "SalesInvoice",
    "SalesInvoiceLine",
    "InvoiceStatus",
    "CustomerPayment",
    "CreditNote",
    "CreditNoteLine",
    "CreditNoteStatus",
]
