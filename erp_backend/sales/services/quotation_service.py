# sales/services/quotation_service.py

"""
======================================================
PATH: sales/services/quotation_service.py
======================================================
QUOTATIONS

DRAFT -> SENT -> ACCEPTED | REJECTED | EXPIRED
CANCELLED from DRAFT / SENT

expire_quotations(as_of): SENT quotations with valid_until < as_of -> EXPIRED

convert_quotation_to_order:
- ACCEPTED only (InvalidState)
- at most once (Conflict)
- new SalesOrder in DRAFT with the quotation's lines and tax rate
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.documents import (
    copy_line_payloads,
    create_document,
    get_document,
    lock_document,
    normalize_lines,
)
from core.errors import ConflictError, InvalidInputError
from inventory.services.catalog_service import resolve_line_products
from sales.models import Quotation, QuotationLine, QuotationStatus, SalesOrder
from sales.services.crm_service import resolve_customer
from sales.services.sales_lifecycle import QUOTATION
from sequences.models import DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("sales")


def _lock(tenant_id, quotation_id) -> Quotation:
    return lock_document(Quotation, tenant_id=tenant_id, document_id=quotation_id, label="Quotation")


def get_quotation(*, tenant_id, quotation_id) -> Quotation:
    return get_document(Quotation, tenant_id=tenant_id, document_id=quotation_id, label="Quotation")


@transaction.atomic
def create_quotation(
    *,
    tenant_id,
    lines,
    customer_id=None,
    date=None,
    valid_until=None,
    notes: str = "",
    tax_rate=0,
) -> Quotation:
    require_tenant_id(tenant_id)
    customer = resolve_customer(tenant_id=tenant_id, customer_id=customer_id)
    normalized = normalize_lines(resolve_line_products(tenant_id=tenant_id, lines=lines))

    quote_date = date or timezone.localdate()
    if valid_until is not None and valid_until < quote_date:
        raise InvalidInputError("valid_until cannot be before the quotation date")

    quotation = create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.QUOTATION,
        model=Quotation,
        line_model=QuotationLine,
        line_field="quotation",
        lines=normalized,
        tax_rate=tax_rate,
        date=quote_date,
        customer=customer,
        valid_until=valid_until,
        notes=notes or "",
    )

    logger.info(
        "Quotation created",
        extra={
            "tenant_id": str(tenant_id),
            "quotation_id": str(quotation.id),
            "number": quotation.number,
            "total": str(quotation.total),
        },
    )
    return quotation


def _transition(*, tenant_id, quotation_id, target: str, stamp: str | None = None) -> Quotation:
    quotation = _lock(tenant_id, quotation_id)
    QUOTATION.validate(quotation, target)

    quotation.status = target
    update_fields = ["status", "updated_at"]
    if stamp:
        setattr(quotation, stamp, timezone.now())
        update_fields.append(stamp)
    quotation.save(update_fields=update_fields)

    logger.info(
        "Quotation status changed",
        extra={"tenant_id": str(tenant_id), "number": quotation.number, "status": target},
    )
    return quotation


@transaction.atomic
def send_quotation(*, tenant_id, quotation_id) -> Quotation:
    return _transition(tenant_id=tenant_id, quotation_id=quotation_id, target=QuotationStatus.SENT, stamp="sent_at")


@transaction.atomic
def accept_quotation(*, tenant_id, quotation_id) -> Quotation:
    return _transition(
        tenant_id=tenant_id, quotation_id=quotation_id, target=QuotationStatus.ACCEPTED, stamp="decided_at"
    )


@transaction.atomic
def reject_quotation(*, tenant_id, quotation_id) -> Quotation:
    return _transition(
        tenant_id=tenant_id, quotation_id=quotation_id, target=QuotationStatus.REJECTED, stamp="decided_at"
    )


@transaction.atomic
def cancel_quotation(*, tenant_id, quotation_id) -> Quotation:
    return _transition(tenant_id=tenant_id, quotation_id=quotation_id, target=QuotationStatus.CANCELLED)


@transaction.atomic
def expire_quotations(*, tenant_id, as_of=None) -> list[str]:
    """Expire every SENT quotation whose validity ended before `as_of` (default today)."""
    require_tenant_id(tenant_id)
    as_of = as_of or timezone.localdate()

    lapsed = list(
        Quotation.objects.select_for_update()
        .filter(tenant_id=tenant_id, status=QuotationStatus.SENT, valid_until__lt=as_of)
        .order_by("number")
    )
    now = timezone.now()
    for quotation in lapsed:
        QUOTATION.validate(quotation, QuotationStatus.EXPIRED)
        quotation.status = QuotationStatus.EXPIRED
        quotation.decided_at = now
        quotation.updated_at = now
    Quotation.objects.bulk_update(lapsed, ["status", "decided_at", "updated_at"])

    numbers = [q.number for q in lapsed]
    if numbers:
        logger.info(
            "Quotations expired",
            extra={"tenant_id": str(tenant_id), "as_of": as_of.isoformat(), "numbers": numbers},
        )
    return numbers


@transaction.atomic
def convert_quotation_to_order(*, tenant_id, quotation_id) -> SalesOrder:
    from sales.services.order_service import create_sales_order

    quotation = _lock(tenant_id, quotation_id)

    if SalesOrder.objects.filter(quotation=quotation).exists():
        raise ConflictError(f"Quotation {quotation.number} was already converted")
    QUOTATION.require(quotation, QuotationStatus.ACCEPTED, action="convert to sales order")

    order = create_sales_order(
        tenant_id=tenant_id,
        customer_id=quotation.customer_id,
        lines=copy_line_payloads(quotation.lines.select_related("product")),
        tax_rate=quotation.tax_rate,
        notes=quotation.notes,
        quotation=quotation,
    )

    logger.info(
        "Quotation converted",
        extra={"tenant_id": str(tenant_id), "quotation": quotation.number, "sales_order": order.number},
    )
    return order
