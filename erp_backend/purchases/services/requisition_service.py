# purchases/services/requisition_service.py

"""
======================================================
PATH: purchases/services/requisition_service.py
======================================================
PURCHASE REQUISITIONS

DRAFT -> SUBMITTED -> APPROVED | REJECTED
CANCELLED from DRAFT / SUBMITTED / APPROVED (never once converted)

convert_requisition_to_po:
- APPROVED only (InvalidState)
- at most once (Conflict)
- new PO in DRAFT with the requisition's lines and tax rate
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
from core.errors import ConflictError, InvalidStateError
from inventory.services.catalog_service import resolve_line_products
from purchases.models import PurchaseOrder, Requisition, RequisitionLine, RequisitionStatus
from purchases.services.purchase_lifecycle import REQUISITION
from sequences.models import DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("purchases")


def _lock(tenant_id, requisition_id) -> Requisition:
    return lock_document(Requisition, tenant_id=tenant_id, document_id=requisition_id, label="Requisition")


def get_requisition(*, tenant_id, requisition_id) -> Requisition:
    return get_document(Requisition, tenant_id=tenant_id, document_id=requisition_id, label="Requisition")


@transaction.atomic
def create_requisition(
    *,
    tenant_id,
    lines,
    date=None,
    notes: str = "",
    tax_rate=0,
    requested_by=None,
) -> Requisition:
    require_tenant_id(tenant_id)
    normalized = normalize_lines(resolve_line_products(tenant_id=tenant_id, lines=lines))

    fields = {"notes": notes or "", "requested_by": requested_by}
    if date is not None:
        fields["date"] = date

    requisition = create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.REQUISITION,
        model=Requisition,
        line_model=RequisitionLine,
        line_field="requisition",
        lines=normalized,
        tax_rate=tax_rate,
        **fields,
    )

    logger.info(
        "Requisition created",
        extra={
            "tenant_id": str(tenant_id),
            "requisition_id": str(requisition.id),
            "number": requisition.number,
            "total": str(requisition.total),
        },
    )
    return requisition


def _transition(*, tenant_id, requisition_id, target: str, stamp: str | None = None) -> Requisition:
    requisition = _lock(tenant_id, requisition_id)
    REQUISITION.validate(requisition, target)

    requisition.status = target
    update_fields = ["status", "updated_at"]
    if stamp:
        setattr(requisition, stamp, timezone.now())
        update_fields.append(stamp)
    requisition.save(update_fields=update_fields)

    logger.info(
        "Requisition status changed",
        extra={
            "tenant_id": str(tenant_id),
            "requisition_id": str(requisition.id),
            "number": requisition.number,
            "status": target,
        },
    )
    return requisition


@transaction.atomic
def submit_requisition(*, tenant_id, requisition_id) -> Requisition:
    return _transition(
        tenant_id=tenant_id, requisition_id=requisition_id, target=RequisitionStatus.SUBMITTED, stamp="submitted_at"
    )


@transaction.atomic
def approve_requisition(*, tenant_id, requisition_id) -> Requisition:
    return _transition(
        tenant_id=tenant_id, requisition_id=requisition_id, target=RequisitionStatus.APPROVED, stamp="decided_at"
    )


@transaction.atomic
def reject_requisition(*, tenant_id, requisition_id) -> Requisition:
    return _transition(
        tenant_id=tenant_id, requisition_id=requisition_id, target=RequisitionStatus.REJECTED, stamp="decided_at"
    )


@transaction.atomic
def cancel_requisition(*, tenant_id, requisition_id) -> Requisition:
    requisition = _lock(tenant_id, requisition_id)
    if requisition.is_converted:
        raise InvalidStateError(
            f"Requisition {requisition.number} was converted to a purchase order and cannot be cancelled"
        )
    return _transition(tenant_id=tenant_id, requisition_id=requisition_id, target=RequisitionStatus.CANCELLED)


@transaction.atomic
def convert_requisition_to_po(*, tenant_id, requisition_id, vendor_id=None) -> PurchaseOrder:
    from purchases.services.purchase_order_service import create_purchase_order

    requisition = _lock(tenant_id, requisition_id)

    if requisition.is_converted:
        raise ConflictError(f"Requisition {requisition.number} was already converted")
    REQUISITION.require(requisition, RequisitionStatus.APPROVED, action="convert to purchase order")

    order = create_purchase_order(
        tenant_id=tenant_id,
        vendor_id=vendor_id,
        lines=copy_line_payloads(requisition.lines.select_related("product")),
        tax_rate=requisition.tax_rate,
        notes=requisition.notes,
        requisition=requisition,
    )

    logger.info(
        "Requisition converted",
        extra={
            "tenant_id": str(tenant_id),
            "requisition": requisition.number,
            "purchase_order": order.number,
        },
    )
    return order
