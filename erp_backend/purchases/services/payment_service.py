# purchases/services/payment_service.py

"""
VENDOR PAYMENTS

record_vendor_payment (atomic, bill row-locked):
- bill must be POSTED or PARTIALLY_PAID
- 0 < amount <= outstanding + 0.01
- journal PAY:<payment id>: Dr Accounts Payable / Cr Cash|Bank
- paid_amount += amount; status PARTIALLY_PAID or PAID (tolerance 0.01)
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.services import posting
from core.documents import SETTLEMENT_TOLERANCE, PaymentMethod, settlement_status
from core.errors import InvalidInputError
from core.money import ZERO, money
from purchases.models import BillStatus, VendorPayment
from purchases.services.billing_service import lock_vendor_bill
from purchases.services.purchase_lifecycle import PAYABLE_STATUSES, VENDOR_BILL
from tenants.context import require_tenant_id

logger = logging.getLogger("purchases")


def _payment_method(method) -> str:
    value = str(method or PaymentMethod.CASH).strip().upper()
    if value not in PaymentMethod.values:
        raise InvalidInputError(f"Invalid payment method {method!r}. Use CASH or BANK.")
    return value


@transaction.atomic
def record_vendor_payment(
    *,
    tenant_id,
    bill_id,
    amount,
    method: str = PaymentMethod.CASH,
    date=None,
    memo: str = "",
) -> VendorPayment:
    bill = lock_vendor_bill(tenant_id=tenant_id, bill_id=bill_id)
    VENDOR_BILL.require(bill, *PAYABLE_STATUSES, action="record payment")

    amt = money(amount)
    if amt <= ZERO:
        raise InvalidInputError("Payment amount must be > 0")

    outstanding = bill.outstanding
    if amt > outstanding + SETTLEMENT_TOLERANCE:
        raise InvalidInputError(
            f"Payment {amt} exceeds the outstanding {outstanding} on bill {bill.number}",
            outstanding=str(outstanding),
        )

    method = _payment_method(method)
    pay_date = date or timezone.localdate()

    payment = VendorPayment.objects.create(
        tenant_id=tenant_id,
        bill=bill,
        date=pay_date,
        amount=amt,
        method=method,
        memo=memo or f"Payment for bill {bill.number}",
    )

    if posting.ledger_enabled(tenant_id=tenant_id):
        payment.journal_entry = posting.post_vendor_payment(
            tenant_id=tenant_id,
            date=pay_date,
            reference=f"PAY:{payment.id}",
            amount=amt,
            method=method,
            memo=f"Vendor payment for bill {bill.number}",
        )
        payment.save(update_fields=["journal_entry"])

    bill.paid_amount = money(bill.paid_amount + amt)
    target = settlement_status(
        total=bill.total,
        settled=bill.paid_amount,
        posted=BillStatus.POSTED,
        partially_paid=BillStatus.PARTIALLY_PAID,
        paid=BillStatus.PAID,
    )
    VENDOR_BILL.validate(bill, target)
    bill.status = target
    bill.save(update_fields=["paid_amount", "status", "updated_at"])

    logger.info(
        "Vendor payment recorded",
        extra={
            "tenant_id": str(tenant_id),
            "bill": bill.number,
            "payment_id": str(payment.id),
            "amount": str(amt),
            "method": method,
            "bill_status": bill.status,
            "journal_entry_id": payment.journal_entry_id,
        },
    )
    return payment


def list_vendor_payments(*, tenant_id, bill_id=None):
    require_tenant_id(tenant_id)
    qs = VendorPayment.objects.filter(tenant_id=tenant_id).select_related("bill")
    if bill_id is not None:
        qs = qs.filter(bill_id=bill_id)
    return qs.order_by("-date", "-created_at")
