# sales/services/payment_service.py

"""
CUSTOMER PAYMENTS

record_customer_payment (atomic, invoice row-locked):
- invoice must be POSTED or PARTIALLY_PAID
- 0 < amount <= outstanding + 0.01 (outstanding net of posted credit notes)
- journal RCPT:<payment id>: Dr Cash|Bank / Cr Accounts Receivable
- status PARTIALLY_PAID or PAID from paid + credited amounts
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.services import posting
from core.documents import SETTLEMENT_TOLERANCE, PaymentMethod, settlement_status
from core.errors import InvalidInputError
from core.money import ZERO, money
from sales.models import CustomerPayment, InvoiceStatus
from sales.services.invoice_service import lock_sales_invoice
from sales.services.sales_lifecycle import RECEIVABLE_STATUSES, SALES_INVOICE
from tenants.context import require_tenant_id

logger = logging.getLogger("sales")


def invoice_settlement_status(invoice) -> str:
    return settlement_status(
        total=invoice.total,
        settled=invoice.settled_amount,
        posted=InvoiceStatus.POSTED,
        partially_paid=InvoiceStatus.PARTIALLY_PAID,
        paid=InvoiceStatus.PAID,
    )


@transaction.atomic
def record_customer_payment(
    *,
    tenant_id,
    invoice_id,
    amount,
    method: str = PaymentMethod.CASH,
    date=None,
    memo: str = "",
) -> CustomerPayment:
    invoice = lock_sales_invoice(tenant_id=tenant_id, invoice_id=invoice_id)
    SALES_INVOICE.require(invoice, *RECEIVABLE_STATUSES, action="record payment")

    amt = money(amount)
    if amt <= ZERO:
        raise InvalidInputError("Payment amount must be > 0")

    outstanding = invoice.outstanding
    if amt > outstanding + SETTLEMENT_TOLERANCE:
        raise InvalidInputError(
            f"Payment {amt} exceeds the outstanding {outstanding} on invoice {invoice.number}",
            outstanding=str(outstanding),
        )

    method = str(method or PaymentMethod.CASH).strip().upper()
    if method not in PaymentMethod.values:
        raise InvalidInputError(f"Invalid payment method {method!r}. Use CASH or BANK.")
    pay_date = date or timezone.localdate()

    payment = CustomerPayment.objects.create(
        tenant_id=tenant_id,
        invoice=invoice,
        date=pay_date,
        amount=amt,
        method=method,
        memo=memo or f"Receipt for invoice {invoice.number}",
    )

    if posting.ledger_enabled(tenant_id=tenant_id):
        payment.journal_entry = posting.post_customer_payment(
            tenant_id=tenant_id,
            date=pay_date,
            reference=f"RCPT:{payment.id}",
            amount=amt,
            method=method,
            memo=f"Customer payment for invoice {invoice.number}",
        )
        payment.save(update_fields=["journal_entry"])

    invoice.paid_amount = money(invoice.paid_amount + amt)
    target = invoice_settlement_status(invoice)
    SALES_INVOICE.validate(invoice, target)
    invoice.status = target
    invoice.save(update_fields=["paid_amount", "status", "updated_at"])

    logger.info(
        "Customer payment recorded",
        extra={
            "tenant_id": str(tenant_id),
            "invoice": invoice.number,
            "payment_id": str(payment.id),
            "amount": str(amt),
            "method": method,
            "invoice_status": invoice.status,
            "journal_entry_id": payment.journal_entry_id,
        },
    )
    return payment


def list_customer_payments(*, tenant_id, invoice_id=None):
    require_tenant_id(tenant_id)
    qs = CustomerPayment.objects.filter(tenant_id=tenant_id).select_related("invoice")
    if invoice_id is not None:
        qs = qs.filter(invoice_id=invoice_id)
    return qs.order_by("-date", "-created_at")
