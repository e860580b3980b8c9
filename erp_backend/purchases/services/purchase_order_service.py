# purchases/services/purchase_order_service.py

"""
======================================================
PATH: purchases/services/purchase_order_service.py
======================================================
PURCHASE ORDERS

DRAFT -> CONFIRMED -> RECEIVED -> BILLED
CANCELLED from DRAFT / CONFIRMED, only while nothing was received.

Numbers come from the sequence generator (PO-xxxxx), allocated inside the
insert transaction.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.documents import create_document, get_document, lock_document, normalize_lines
from core.errors import InvalidStateError
from inventory.services.catalog_service import resolve_line_products
from purchases.models import PurchaseOrder, PurchaseOrderLine, PurchaseOrderStatus
from purchases.services.purchase_lifecycle import PURCHASE_ORDER
from purchases.services.vendor_service import resolve_vendor
from sequences.models import DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("purchases")


def lock_purchase_order(*, tenant_id, purchase_order_id) -> PurchaseOrder:
    return lock_document(PurchaseOrder, tenant_id=tenant_id, document_id=purchase_order_id, label="Purchase order")


def get_purchase_order(*, tenant_id, purchase_order_id) -> PurchaseOrder:
    return get_document(PurchaseOrder, tenant_id=tenant_id, document_id=purchase_order_id, label="Purchase order")


@transaction.atomic
def create_purchase_order(
    *,
    tenant_id,
    lines,
    vendor_id=None,
    date=None,
    expected_date=None,
    notes: str = "",
    tax_rate=0,
    requisition=None,
) -> PurchaseOrder:
    require_tenant_id(tenant_id)
    vendor = resolve_vendor(tenant_id=tenant_id, vendor_id=vendor_id)
    normalized = normalize_lines(resolve_line_products(tenant_id=tenant_id, lines=lines))

    fields = {
        "vendor": vendor,
        "expected_date": expected_date,
        "notes": notes or "",
        "requisition": requisition,
    }
    if date is not None:
        fields["date"] = date

    order = create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.PURCHASE_ORDER,
        model=PurchaseOrder,
        line_model=PurchaseOrderLine,
        line_field="order",
        lines=normalized,
        tax_rate=tax_rate,
        **fields,
    )

    logger.info(
        "Purchase order created",
        extra={
            "tenant_id": str(tenant_id),
            "purchase_order_id": str(order.id),
            "number": order.number,
            "vendor_id": str(vendor.id) if vendor else None,
            "total": str(order.total),
        },
    )
    return order


@transaction.atomic
def confirm_purchase_order(*, tenant_id, purchase_order_id) -> PurchaseOrder:
    order = lock_purchase_order(tenant_id=tenant_id, purchase_order_id=purchase_order_id)
    PURCHASE_ORDER.validate(order, PurchaseOrderStatus.CONFIRMED)

    order.status = PurchaseOrderStatus.CONFIRMED
    order.confirmed_at = timezone.now()
    order.save(update_fields=["status", "confirmed_at", "updated_at"])

    logger.info(
        "Purchase order confirmed",
        extra={"tenant_id": str(tenant_id), "purchase_order_id": str(order.id), "number": order.number},
    )
    return order


@transaction.atomic
def cancel_purchase_order(*, tenant_id, purchase_order_id) -> PurchaseOrder:
    order = lock_purchase_order(tenant_id=tenant_id, purchase_order_id=purchase_order_id)
    PURCHASE_ORDER.validate(order, PurchaseOrderStatus.CANCELLED)

    if order.receipts.exists():
        raise InvalidStateError(f"Purchase order {order.number} has goods receipts and cannot be cancelled")

    order.status = PurchaseOrderStatus.CANCELLED
    order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Purchase order cancelled",
        extra={"tenant_id": str(tenant_id), "purchase_order_id": str(order.id), "number": order.number},
    )
    return order

