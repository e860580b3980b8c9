# sales/services/order_service.py

"""
SALES ORDERS

DRAFT -> CONFIRMED -> FULFILLED (by invoicing)
CANCELLED from DRAFT / CONFIRMED
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.documents import create_document, get_document, lock_document, normalize_lines
from inventory.services.catalog_service import resolve_line_products
from sales.models import SalesOrder, SalesOrderLine, SalesOrderStatus
from sales.services.crm_service import resolve_customer
from sales.services.sales_lifecycle import SALES_ORDER
from sequences.models import DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("sales")


def lock_sales_order(*, tenant_id, sales_order_id) -> SalesOrder:
    return lock_document(SalesOrder, tenant_id=tenant_id, document_id=sales_order_id, label="Sales order")


def get_sales_order(*, tenant_id, sales_order_id) -> SalesOrder:
    return get_document(SalesOrder, tenant_id=tenant_id, document_id=sales_order_id, label="Sales order")


@transaction.atomic
def create_sales_order(
    *,
    tenant_id,
    lines,
    customer_id=None,
    date=None,
    notes: str = "",
    tax_rate=0,
    quotation=None,
) -> SalesOrder:
    require_tenant_id(tenant_id)
    customer = resolve_customer(tenant_id=tenant_id, customer_id=customer_id)
    normalized = normalize_lines(resolve_line_products(tenant_id=tenant_id, lines=lines))

    fields = {"customer": customer, "notes": notes or "", "quotation": quotation}
    if date is not None:
        fields["date"] = date

    order = create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.SALES_ORDER,
        model=SalesOrder,
        line_model=SalesOrderLine,
        line_field="order",
        lines=normalized,
        tax_rate=tax_rate,
        **fields,
    )

    logger.info(
        "Sales order created",
        extra={
            "tenant_id": str(tenant_id),
            "sales_order_id": str(order.id),
            "number": order.number,
            "total": str(order.total),
        },
    )
    return order


@transaction.atomic
def confirm_sales_order(*, tenant_id, sales_order_id) -> SalesOrder:
    order = lock_sales_order(tenant_id=tenant_id, sales_order_id=sales_order_id)
    SALES_ORDER.validate(order, SalesOrderStatus.CONFIRMED)

    order.status = SalesOrderStatus.CONFIRMED
    order.confirmed_at = timezone.now()
    order.save(update_fields=["status", "confirmed_at", "updated_at"])

    logger.info("Sales order confirmed", extra={"tenant_id": str(tenant_id), "number": order.number})
    return order


@transaction.atomic
def cancel_sales_order(*, tenant_id, sales_order_id) -> SalesOrder:
    order = lock_sales_order(tenant_id=tenant_id, sales_order_id=sales_order_id)
    SALES_ORDER.validate(order, SalesOrderStatus.CANCELLED)

    order.status = SalesOrderStatus.CANCELLED
    order.save(update_fields=["status", "updated_at"])

    logger.info("Sales order cancelled", extra={"tenant_id": str(tenant_id), "number": order.number})
    return order
