# purchases/services/receiving_service.py

"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
GOODS RECEIVING SERVICE

create_goods_receipt atomically:
1) Lock the PO (must be CONFIRMED) and its lines
2) Validate every received quantity against the open quantity
3) RECEIPT recognition mode: RECEIPT stock move for stock products at the
   default (or given) location, posted when auto_post_receipts is on
   (Dr Inventory / Cr Accrued Expenses at standard cost)
4) Record received_quantity per PO line
5) PO -> RECEIVED only when EVERY line is fully received; a partial
   receipt keeps the PO CONFIRMED

BILL recognition mode records quantities only; stock enters on the bill.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from django.db import transaction

from core.errors import InvalidInputError, NotFoundError
from core.money import quantity
from inventory.models import PurchaseStockRecognition
from inventory.services.settings_service import get_inventory_settings
from inventory.services.stock_move_service import receive_into_stock
from inventory.services.warehouse_service import get_default_stock_location, get_location
from purchases.models import (
    GoodsReceipt,
    GoodsReceiptLine,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)
from purchases.services.purchase_lifecycle import PURCHASE_ORDER
from purchases.services.purchase_order_service import lock_purchase_order
from sequences.models import DocumentType
from sequences.services.sequence_service import create_numbered
from tenants.context import require_tenant_id

logger = logging.getLogger("purchases")


def _collect_lines(*, tenant_id, order, order_lines: dict, lines) -> list[dict]:
    """
    Validate receipt lines; quantities for the same PO line are summed
    before checking the open quantity.
    """
    if lines is None:
        # receive everything still open
        lines = [
            {"order_line_id": line.id, "quantity": line.open_quantity}
            for line in order_lines.values()
            if line.open_quantity > 0
        ]
    if not lines:
        raise InvalidInputError(f"Nothing to receive on purchase order {order.number}")

    out = []
    totals: OrderedDict = OrderedDict()
    for idx, raw in enumerate(lines, start=1):
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Line {idx} must be an object")

        try:
            order_line = order_lines[int(raw.get("order_line_id"))]
        except (KeyError, TypeError, ValueError) as exc:
            raise NotFoundError(f"Line {idx}: order line not found on {order.number}") from exc

        qty = quantity(raw.get("quantity"))
        if qty <= 0:
            raise InvalidInputError(f"Line {idx}: quantity must be > 0")

        location = None
        if raw.get("location_id") not in (None, ""):
            location = get_location(tenant_id=tenant_id, location_id=raw["location_id"])

        totals[order_line.id] = totals.get(order_line.id, quantity(0)) + qty
        out.append({"order_line": order_line, "quantity": qty, "location": location})

    for line_id, qty in totals.items():
        open_qty = order_lines[line_id].open_quantity
        if qty > open_qty:
            raise InvalidInputError(
                f"Cannot receive {qty} on line {line_id} of {order.number}: only {open_qty} open"
            )
    return out


@transaction.atomic
def create_goods_receipt(*, tenant_id, purchase_order_id, lines=None, date=None, notes: str = "") -> GoodsReceipt:
    order = lock_purchase_order(tenant_id=tenant_id, purchase_order_id=purchase_order_id)
    PURCHASE_ORDER.require(order, PurchaseOrderStatus.CONFIRMED, action="receive goods")

    order_lines = OrderedDict(
        (line.id, line)
        for line in PurchaseOrderLine.objects.select_for_update()
        .select_related("product")
        .filter(order=order)
        .order_by("id")
    )
    received = _collect_lines(tenant_id=tenant_id, order=order, order_lines=order_lines, lines=lines)

    settings = get_inventory_settings(tenant_id=tenant_id)

    def _create(number: str) -> GoodsReceipt:
        fields = {"notes": notes or ""}
        if date is not None:
            fields["date"] = date
        return GoodsReceipt.objects.create(
            tenant_id=tenant_id, number=number, purchase_order=order, **fields
        )

    receipt = create_numbered(
        tenant_id=tenant_id,
        document_type=DocumentType.GOODS_RECEIPT,
        model=GoodsReceipt,
        create=_create,
    )

    if settings.purchase_stock_recognition == PurchaseStockRecognition.RECEIPT:
        default_location = None
        for r in received:
            product = r["order_line"].product
            if r["location"] is None and product is not None and product.is_stockable:
                default_location = default_location or get_default_stock_location(tenant_id=tenant_id)
                r["location"] = default_location

        receipt.stock_move = receive_into_stock(
            tenant_id=tenant_id,
            lines=[
                {"product": r["order_line"].product, "quantity": r["quantity"], "location": r["location"]}
                for r in received
            ],
            date=receipt.date,
            memo=f"Goods receipt {receipt.number} for {order.number}",
            source_reference=receipt.number,
            post=settings.auto_post_receipts,
        )
        if receipt.stock_move is not None:
            receipt.save(update_fields=["stock_move"])

    GoodsReceiptLine.objects.bulk_create(
        [
            GoodsReceiptLine(
                receipt=receipt,
                order_line=r["order_line"],
                product=r["order_line"].product,
                location=r["location"],
                quantity=r["quantity"],
            )
            for r in received
        ]
    )

    for r in received:
        line = r["order_line"]
        line.received_quantity = quantity(line.received_quantity + r["quantity"])
    PurchaseOrderLine.objects.bulk_update(list(order_lines.values()), ["received_quantity"])

    if all(line.open_quantity <= 0 for line in order_lines.values()):
        PURCHASE_ORDER.validate(order, PurchaseOrderStatus.RECEIVED)
        order.status = PurchaseOrderStatus.RECEIVED
        order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Goods received",
        extra={
            "tenant_id": str(tenant_id),
            "purchase_order": order.number,
            "goods_receipt": receipt.number,
            "stock_move": receipt.stock_move.number if receipt.stock_move else None,
            "po_status": order.status,
        },
    )
    return receipt


def list_goods_receipts(*, tenant_id, purchase_order_id=None):
    require_tenant_id(tenant_id)
    qs = GoodsReceipt.objects.filter(tenant_id=tenant_id).select_related("purchase_order", "stock_move")
    if purchase_order_id is not None:
        qs = qs.filter(purchase_order_id=purchase_order_id)
    return qs.prefetch_related("lines").order_by("-date", "-created_at")
