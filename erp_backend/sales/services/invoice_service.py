# sales/services/invoice_service.py

"""
======================================================
PATH: sales/services/invoice_service.py
======================================================
SALES INVOICES

create_invoice_from_order:
- order already FULFILLED -> Conflict
- order must be CONFIRMED (InvalidState)
- copies lines + tax rate; order -> FULFILLED

post_sales_invoice (DRAFT -> POSTED), one transaction:
- ISSUE stock move for stock products from the default location
  (InsufficientStock aborts everything)
- journal INV:<number>
    Dr Accounts Receivable   total
    Cr Sales Revenue         subtotal
    Cr Tax Payable           tax
    Dr COGS / Cr Inventory   standard value of issued stock
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings as django_settings
from django.db import transaction
from django.utils import timezone

from accounting.services import posting
from core.documents import (
    copy_line_payloads,
    create_document,
    get_document,
    lock_document,
    normalize_lines,
)
from core.errors import ConflictError
from inventory.services.catalog_service import resolve_line_products
from inventory.services.stock_move_service import issue_from_stock, stock_value
from sales.models import InvoiceStatus, SalesInvoice, SalesInvoiceLine, SalesOrderStatus
from sales.services.crm_service import resolve_customer
from sales.services.order_service import lock_sales_order
from sales.services.sales_lifecycle import POSTED_INVOICE_STATUSES, SALES_INVOICE, SALES_ORDER
from sequences.models import DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("sales")


def _default_due_date(invoice_date):
    days = int(getattr(django_settings, "ERP_INVOICE_DUE_DAYS", 30))
    return invoice_date + timedelta(days=days)


def get_sales_invoice(*, tenant_id, invoice_id) -> SalesInvoice:
    return get_document(SalesInvoice, tenant_id=tenant_id, document_id=invoice_id, label="Sales invoice")


def lock_sales_invoice(*, tenant_id, invoice_id) -> SalesInvoice:
    return lock_document(SalesInvoice, tenant_id=tenant_id, document_id=invoice_id, label="Sales invoice")


def _create_invoice(*, tenant_id, lines, tax_rate, date=None, due_date=None, **fields) -> SalesInvoice:
    invoice_date = date or timezone.localdate()
    return create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.SALES_INVOICE,
        model=SalesInvoice,
        line_model=SalesInvoiceLine,
        line_field="invoice",
        lines=lines,
        tax_rate=tax_rate,
        date=invoice_date,
        due_date=due_date or _default_due_date(invoice_date),
        **fields,
    )


@transaction.atomic
def create_sales_invoice(
    *,
    tenant_id,
    lines,
    customer_id=None,
    date=None,
    due_date=None,
    tax_rate=0,
    notes: str = "",
) -> SalesInvoice:
    """Direct invoice without a sales order."""
    require_tenant_id(tenant_id)
    customer = resolve_customer(tenant_id=tenant_id, customer_id=customer_id)
    normalized = normalize_lines(resolve_line_products(tenant_id=tenant_id, lines=lines))

    invoice = _create_invoice(
        tenant_id=tenant_id,
        lines=normalized,
        tax_rate=tax_rate,
        date=date,
        due_date=due_date,
        customer=customer,
        notes=notes or "",
    )
    logger.info(
        "Sales invoice created",
        extra={"tenant_id": str(tenant_id), "number": invoice.number, "total": str(invoice.total)},
    )
    return invoice


@transaction.atomic
def create_invoice_from_order(*, tenant_id, sales_order_id, date=None, due_date=None) -> SalesInvoice:
    order = lock_sales_order(tenant_id=tenant_id, sales_order_id=sales_order_id)

    if order.status == SalesOrderStatus.FULFILLED or SalesInvoice.objects.filter(sales_order=order).exists():
        raise ConflictError(f"Sales order {order.number} is already invoiced")
    SALES_ORDER.require(order, SalesOrderStatus.CONFIRMED, action="create invoice")

    invoice = _create_invoice(
        tenant_id=tenant_id,
        lines=normalize_lines(copy_line_payloads(order.lines.select_related("product"))),
        tax_rate=order.tax_rate,
        date=date,
        due_date=due_date,
        customer=order.customer,
        sales_order=order,
        notes=order.notes,
    )

    SALES_ORDER.validate(order, SalesOrderStatus.FULFILLED)
    order.status = SalesOrderStatus.FULFILLED
    order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Sales invoice created from order",
        extra={
            "tenant_id": str(tenant_id),
            "sales_order": order.number,
            "invoice": invoice.number,
            "total": str(invoice.total),
        },
    )
    return invoice


@transaction.atomic
def post_sales_invoice(*, tenant_id, invoice_id) -> SalesInvoice:
    invoice = lock_sales_invoice(tenant_id=tenant_id, invoice_id=invoice_id)
    if invoice.status in POSTED_INVOICE_STATUSES:
        raise ConflictError(f"Sales invoice {invoice.number} is already posted")
    SALES_INVOICE.validate(invoice, InvoiceStatus.POSTED)

    lines = list(invoice.lines.select_related("product"))

    invoice.stock_move = issue_from_stock(
        tenant_id=tenant_id,
        lines=[{"product": line.product, "quantity": line.quantity} for line in lines],
        date=invoice.date,
        memo=f"Sales invoice {invoice.number}",
        source_reference=invoice.number,
        emit_journal=False,
    )

    if posting.ledger_enabled(tenant_id=tenant_id):
        invoice.journal_entry = posting.post_sales_invoice(
            tenant_id=tenant_id,
            date=invoice.date,
            reference=f"INV:{invoice.number}",
            subtotal=invoice.subtotal,
            tax_amount=invoice.tax_amount,
            total=invoice.total,
            cost_value=stock_value(lines),
            memo=f"Sales invoice {invoice.number} posted",
        )

    invoice.status = InvoiceStatus.POSTED
    invoice.posted_at = timezone.now()
    invoice.save(update_fields=["status", "posted_at", "journal_entry", "stock_move", "updated_at"])

    logger.info(
        "Sales invoice posted",
        extra={
            "tenant_id": str(tenant_id),
            "invoice": invoice.number,
            "total": str(invoice.total),
            "journal_entry_id": invoice.journal_entry_id,
            "stock_move": invoice.stock_move.number if invoice.stock_move else None,
        },
    )
    return invoice


@transaction.atomic
def cancel_sales_invoice(*, tenant_id, invoice_id) -> SalesInvoice:
    invoice = lock_sales_invoice(tenant_id=tenant_id, invoice_id=invoice_id)
    SALES_INVOICE.validate(invoice, InvoiceStatus.CANCELLED)

    invoice.status = InvoiceStatus.CANCELLED
    invoice.save(update_fields=["status", "updated_at"])

    logger.info("Sales invoice cancelled", extra={"tenant_id": str(tenant_id), "invoice": invoice.number})
    return invoice
