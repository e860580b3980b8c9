# sales/services/credit_note_service.py

"""
======================================================
PATH: sales/services/credit_note_service.py
======================================================
CREDIT NOTES

create_credit_note(invoice_id, lines?):
- invoice must be posted (POSTED / PARTIALLY_PAID / PAID)
- lines default to the invoice's lines, tax rate is the invoice's
- total <= invoice total - already credited (InvalidInput)

post_credit_note (DRAFT -> POSTED), invoice row-locked:
- reversing journal CN:<number>
    Dr Sales Revenue   subtotal
    Dr Tax Payable     tax
    Cr Accounts Receivable total
- invoice.credited_amount += total; invoice status recomputed

Credit notes do not return stock.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.services import posting
from core.documents import (
    SETTLEMENT_TOLERANCE,
    compute_totals,
    copy_line_payloads,
    create_document,
    get_document,
    lock_document,
    normalize_lines,
)
from core.errors import ConflictError, InvalidInputError
from core.money import money
from inventory.services.catalog_service import resolve_line_products
from sales.models import CreditNote, CreditNoteLine, CreditNoteStatus
from sales.services.invoice_service import lock_sales_invoice
from sales.services.payment_service import invoice_settlement_status
from sales.services.sales_lifecycle import CREDIT_NOTE, POSTED_INVOICE_STATUSES, SALES_INVOICE
from sequences.models import DocumentType

logger = logging.getLogger("sales")


def get_credit_note(*, tenant_id, credit_note_id) -> CreditNote:
    return get_document(CreditNote, tenant_id=tenant_id, document_id=credit_note_id, label="Credit note")


def _check_creditable(invoice, total) -> None:
    available = invoice.uncredited_total
    if money(total) > available + SETTLEMENT_TOLERANCE:
        raise InvalidInputError(
            f"Credit {money(total)} exceeds the uncredited {available} on invoice {invoice.number}",
            available=str(available),
        )


@transaction.atomic
def create_credit_note(*, tenant_id, invoice_id, lines=None, date=None, notes: str = "") -> CreditNote:
    invoice = lock_sales_invoice(tenant_id=tenant_id, invoice_id=invoice_id)
    SALES_INVOICE.require(invoice, *POSTED_INVOICE_STATUSES, action="issue credit note")

    if lines is None:
        raw = copy_line_payloads(invoice.lines.select_related("product"))
    else:
        raw = resolve_line_products(tenant_id=tenant_id, lines=lines)
    normalized = normalize_lines(raw)

    _check_creditable(invoice, compute_totals(normalized, invoice.tax_rate).total)

    fields = {"invoice": invoice, "customer": invoice.customer, "notes": notes or f"Credit for {invoice.number}"}
    if date is not None:
        fields["date"] = date

    credit_note = create_document(
        tenant_id=tenant_id,
        document_type=DocumentType.CREDIT_NOTE,
        model=CreditNote,
        line_model=CreditNoteLine,
        line_field="credit_note",
        lines=normalized,
        tax_rate=invoice.tax_rate,
        **fields,
    )

    logger.info(
        "Credit note created",
        extra={
            "tenant_id": str(tenant_id),
            "credit_note": credit_note.number,
            "invoice": invoice.number,
            "total": str(credit_note.total),
        },
    )
    return credit_note


@transaction.atomic
def post_credit_note(*, tenant_id, credit_note_id) -> CreditNote:
    credit_note = lock_document(CreditNote, tenant_id=tenant_id, document_id=credit_note_id, label="Credit note")
    if credit_note.status == CreditNoteStatus.POSTED:
        raise ConflictError(f"Credit note {credit_note.number} is already posted")
    CREDIT_NOTE.validate(credit_note, CreditNoteStatus.POSTED)

    invoice = lock_sales_invoice(tenant_id=tenant_id, invoice_id=credit_note.invoice_id)
    SALES_INVOICE.require(invoice, *POSTED_INVOICE_STATUSES, action="post credit note")
    # another credit note may have been posted since this one was drafted
    _check_creditable(invoice, credit_note.total)

    if posting.ledger_enabled(tenant_id=tenant_id):
        credit_note.journal_entry = posting.post_credit_note(
            tenant_id=tenant_id,
            date=credit_note.date,
            reference=f"CN:{credit_note.number}",
            subtotal=credit_note.subtotal,
            tax_amount=credit_note.tax_amount,
            total=credit_note.total,
            memo=f"Credit note {credit_note.number} for {invoice.number}",
        )

    credit_note.status = CreditNoteStatus.POSTED
    credit_note.posted_at = timezone.now()
    credit_note.save(update_fields=["status", "posted_at", "journal_entry", "updated_at"])

    invoice.credited_amount = money(invoice.credited_amount + credit_note.total)
    target = invoice_settlement_status(invoice)
    if target != invoice.status:
        SALES_INVOICE.validate(invoice, target)
        invoice.status = target
    invoice.save(update_fields=["credited_amount", "status", "updated_at"])

    logger.info(
        "Credit note posted",
        extra={
            "tenant_id": str(tenant_id),
            "credit_note": credit_note.number,
            "invoice": invoice.number,
            "credited_amount": str(invoice.credited_amount),
            "invoice_status": invoice.status,
            "journal_entry_id": credit_note.journal_entry_id,
        },
    )
    return credit_note


@transaction.atomic
def cancel_credit_note(*, tenant_id, credit_note_id) -> CreditNote:
    credit_note = lock_document(CreditNote, tenant_id=tenant_id, document_id=credit_note_id, label="Credit note")
    CREDIT_NOTE.validate(credit_note, CreditNoteStatus.CANCELLED)

    credit_note.status = CreditNoteStatus.CANCELLED
    credit_note.save(update_fields=["status", "updated_at"])

    logger.info("Credit note cancelled", extra={"tenant_id": str(tenant_id), "credit_note": credit_note.number})
    return credit_note
