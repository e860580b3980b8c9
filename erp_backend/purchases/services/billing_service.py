# purchases/services/billing_service.py

"""
======================================================
PATH: purchases/services/billing_service.py
======================================================
VENDOR BILLS

create_bill_from_po:
- PO already billed -> Conflict
- RECEIPT recognition: PO must be RECEIVED
- BILL recognition:    PO must be CONFIRMED or RECEIVED
- copies lines + tax rate; PO -> BILLED

post_vendor_bill (DRAFT -> POSTED), one transaction:
- stock recognized on the bill (BILL mode, or a direct bill without a PO):
  RECEIPT stock move into the default location, valued inside the bill entry
- journal BILL:<number>
    Cr Accounts Payable                 total
    Dr Accrued Expenses (GR/IR)         value the PO's receipts accrued
    Dr Inventory                        stock never valued at receipt
                                        (BILL mode, or post_stock_valuation off)
    Dr/Cr Purchase Expense              remainder
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
from core.money import ZERO
from inventory.models import PurchaseStockRecognition
from inventory.services.catalog_service import resolve_line_products
from inventory.services.settings_service import get_inventory_settings
from inventory.services.stock_move_service import receipt_accrual_split, receive_into_stock, stock_value
from purchases.models import BillStatus, PurchaseOrderStatus, VendorBill, VendorBillLine
from purchases.services.purchase_lifecycle import PURCHASE_ORDER, VENDOR_BILL
from purchases.services.purchase_order_service import lock_purchase_order
from purchases.services.vendor_service import resolve_vendor
from sequences.models import DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("purchases")


def _default_due_date(bill_date):
    days = int(getattr(django_settings, "ERP_BILL_DUE_DAYS", 30))
    return bill_date + timedelta(days=days)


def get_vendor_bill(*, tenant_id, bill_id) -> VendorBill:
    return get_document(VendorBill, tenant_id=tenant_id, document_id=bill_id, label="Vendor bill")


def lock_vendor_bill(*, tenant_id, bill_id) -> VendorBill:
    return lock_document(VendorBill, tenant_id=tenant_id, document_id=bill_id, label="Vendor bill")


def _create_bill(*, tenant_id, lines, tax_rate, date=None, due_date=None, **fields) -> VendorBill:
    bill_date = date or timezone.localdate()
    return create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.VENDOR_BILL,
        model=VendorBill,
        line_model=VendorBillLine,
        line_field="bill",
        lines=lines,
        tax_rate=tax_rate,
        date=bill_date,
        due_date=due_date or _default_due_date(bill_date),
        **fields,
    )


@transaction.atomic
def create_vendor_bill(
    *,
    tenant_id,
    lines,
    vendor_id=None,
    date=None,
    due_date=None,
    tax_rate=0,
    notes: str = "",
) -> VendorBill:
    """Direct bill without a purchase order."""
    require_tenant_id(tenant_id)
    vendor = resolve_vendor(tenant_id=tenant_id, vendor_id=vendor_id)
    normalized = normalize_lines(resolve_line_products(tenant_id=tenant_id, lines=lines))

    bill = _create_bill(
        tenant_id=tenant_id,
        lines=normalized,
        tax_rate=tax_rate,
        date=date,
        due_date=due_date,
        vendor=vendor,
        notes=notes or "",
    )
    logger.info(
        "Vendor bill created",
        extra={"tenant_id": str(tenant_id), "bill_id": str(bill.id), "number": bill.number, "total": str(bill.total)},
    )
    return bill


@transaction.atomic
def create_bill_from_po(*, tenant_id, purchase_order_id, date=None, due_date=None) -> VendorBill:
    order = lock_purchase_order(tenant_id=tenant_id, purchase_order_id=purchase_order_id)

    if order.status == PurchaseOrderStatus.BILLED or VendorBill.objects.filter(purchase_order=order).exists():
        raise ConflictError(f"Purchase order {order.number} is already billed")

    recognition = get_inventory_settings(tenant_id=tenant_id).purchase_stock_recognition
    if recognition == PurchaseStockRecognition.BILL:
        PURCHASE_ORDER.require(
            order, PurchaseOrderStatus.CONFIRMED, PurchaseOrderStatus.RECEIVED, action="create bill"
        )
    else:
        PURCHASE_ORDER.require(order, PurchaseOrderStatus.RECEIVED, action="create bill")

    bill = _create_bill(
        tenant_id=tenant_id,
        lines=normalize_lines(copy_line_payloads(order.lines.select_related("product"))),
        tax_rate=order.tax_rate,
        date=date,
        due_date=due_date,
        vendor=order.vendor,
        purchase_order=order,
        notes=order.notes,
    )

    PURCHASE_ORDER.validate(order, PurchaseOrderStatus.BILLED)
    order.status = PurchaseOrderStatus.BILLED
    order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Vendor bill created from purchase order",
        extra={
            "tenant_id": str(tenant_id),
            "purchase_order": order.number,
            "bill": bill.number,
            "recognition": recognition,
            "total": str(bill.total),
        },
    )
    return bill


@transaction.atomic
def post_vendor_bill(*, tenant_id, bill_id) -> VendorBill:
    bill = lock_vendor_bill(tenant_id=tenant_id, bill_id=bill_id)
    if bill.status in (BillStatus.POSTED, BillStatus.PARTIALLY_PAID, BillStatus.PAID):
        raise ConflictError(f"Vendor bill {bill.number} is already posted")
    VENDOR_BILL.validate(bill, BillStatus.POSTED)

    lines = list(bill.lines.select_related("product"))
    recognition = get_inventory_settings(tenant_id=tenant_id).purchase_stock_recognition
    # without a PO there is no goods receipt to clear, so stock arrives with the bill
    on_bill = recognition == PurchaseStockRecognition.BILL or bill.purchase_order_id is None

    if on_bill:
        bill.stock_move = receive_into_stock(
            tenant_id=tenant_id,
            lines=[{"product": line.product, "quantity": line.quantity} for line in lines],
            date=bill.date,
            memo=f"Vendor bill {bill.number}",
            source_reference=bill.number,
            emit_journal=False,
        )
        inventory_value, accrued_value = stock_value(lines), ZERO
    else:
        receipts = bill.purchase_order.receipts.filter(stock_move__isnull=False).select_related("stock_move")
        accrued_value, inventory_value = receipt_accrual_split(
            tenant_id=tenant_id,
            moves=[receipt.stock_move for receipt in receipts],
        )

    if posting.ledger_enabled(tenant_id=tenant_id):
        bill.journal_entry = posting.post_vendor_bill(
            tenant_id=tenant_id,
            date=bill.date,
            reference=f"BILL:{bill.number}",
            total=bill.total,
            inventory_value=inventory_value,
            accrued_value=accrued_value,
            memo=f"Vendor bill {bill.number} posted",
        )

    bill.status = BillStatus.POSTED
    bill.posted_at = timezone.now()
    bill.save(update_fields=["status", "posted_at", "journal_entry", "stock_move", "updated_at"])

    logger.info(
        "Vendor bill posted",
        extra={
            "tenant_id": str(tenant_id),
            "bill": bill.number,
            "total": str(bill.total),
            "journal_entry_id": bill.journal_entry_id,
            "stock_move": bill.stock_move.number if bill.stock_move else None,
        },
    )
    return bill


@transaction.atomic
def cancel_vendor_bill(*, tenant_id, bill_id) -> VendorBill:
    bill = lock_vendor_bill(tenant_id=tenant_id, bill_id=bill_id)
    VENDOR_BILL.validate(bill, BillStatus.CANCELLED)

    bill.status = BillStatus.CANCELLED
    bill.save(update_fields=["status", "updated_at"])

    logger.info("Vendor bill cancelled", extra={"tenant_id": str(tenant_id), "bill": bill.number})
    return bill

