# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Map business events -> balanced postings, then call the engine
(journal_entry_service.post_journal_entry_for_date).

This module should remain a thin adapter:
- It DOES NOT do workflows (document services do).
- It DOES map business events -> accounting postings.
- It ALWAYS goes through the engine for period checks + idempotency.

Inventory is valued at standard cost (product.standard_cost at the time
of posting). Zero-value legs are dropped; an event with no remaining legs
posts nothing and returns None.
"""

from __future__ import annotations

from decimal import Decimal

from accounting.services import account_resolver as accounts
from accounting.services.journal_entry_service import post_journal_entry_for_date
from core.money import ZERO, money
from tenants.models import Module
from tenants.services.module_access import is_module_enabled


def ledger_enabled(*, tenant_id) -> bool:
    """Document postings write journal entries only for tenants running ACCOUNTING."""
    return is_module_enabled(tenant_id=tenant_id, module=Module.ACCOUNTING)


def _leg(account, *, debit=ZERO, credit=ZERO, memo: str = "") -> dict:
    return {"account": account, "debit": money(debit), "credit": money(credit), "memo": memo}


def _post(*, tenant_id, date, reference: str, memo: str, legs: list[dict]):
    legs = [l for l in legs if l["debit"] > 0 or l["credit"] > 0]
    if len(legs) < 2:
        return None
    return post_journal_entry_for_date(
        tenant_id=tenant_id,
        date=date,
        lines=legs,
        reference=reference,
        memo=memo,
    )


def _account(tenant_id, key):
    return accounts.resolve_account(tenant_id=tenant_id, key=key)


# ------------------------------------------------------------
# INVENTORY
# ------------------------------------------------------------


def post_stock_valuation(
    *,
    tenant_id,
    move_type: str,
    date,
    reference: str,
    increase_value: Decimal,
    decrease_value: Decimal,
    memo: str = "",
):
    """
    RECEIPT:    Dr Inventory / Cr Accrued Expenses (GR/IR)
    ISSUE:      Dr COGS      / Cr Inventory
    ADJUSTMENT: increase -> Dr Inventory / Cr Other Income
                decrease -> Dr COGS      / Cr Inventory
    TRANSFER / QUARANTINE carry no value change.
    """
    increase_value = money(increase_value)
    decrease_value = money(decrease_value)
    legs: list[dict] = []

    if move_type == "RECEIPT":
        legs = [
            _leg(_account(tenant_id, accounts.INVENTORY), debit=increase_value, memo="Stock received"),
            _leg(_account(tenant_id, accounts.ACCRUED_EXPENSES), credit=increase_value, memo="Goods received not invoiced"),
        ]
    elif move_type == "ISSUE":
        legs = [
            _leg(_account(tenant_id, accounts.COGS), debit=decrease_value, memo="Stock issued"),
            _leg(_account(tenant_id, accounts.INVENTORY), credit=decrease_value, memo="Stock issued"),
        ]
    elif move_type == "ADJUSTMENT":
        inventory = _account(tenant_id, accounts.INVENTORY)
        if increase_value > 0:
            legs += [
                _leg(inventory, debit=increase_value, memo="Stock adjustment (increase)"),
                _leg(_account(tenant_id, accounts.OTHER_INCOME), credit=increase_value, memo="Stock adjustment gain"),
            ]
        if decrease_value > 0:
            legs += [
                _leg(_account(tenant_id, accounts.COGS), debit=decrease_value, memo="Stock adjustment loss"),
                _leg(inventory, credit=decrease_value, memo="Stock adjustment (decrease)"),
            ]
    else:
        return None

    return _post(tenant_id=tenant_id, date=date, reference=reference, memo=memo, legs=legs)


# ------------------------------------------------------------
# PROCURE-TO-PAY
# ------------------------------------------------------------


def post_vendor_bill(
    *,
    tenant_id,
    date,
    reference: str,
    total: Decimal,
    inventory_value: Decimal,
    accrued_value: Decimal = ZERO,
    memo: str = "",
):
    """
    Cr Accounts Payable                 total
    Dr Inventory                        inventory_value (stock not valued at receipt)
    Dr Accrued Expenses (GR/IR)         accrued_value (clears the receipt accrual)
    Dr/Cr Purchase Expense              remainder (services, tax, price variance)
    """
    total = money(total)
    inventory_value = money(inventory_value)
    accrued_value = money(accrued_value)
    remainder = money(total - inventory_value - accrued_value)

    expense = _account(tenant_id, accounts.PURCHASE_EXPENSE)

    legs = [
        _leg(_account(tenant_id, accounts.INVENTORY), debit=inventory_value, memo="Stock value at standard cost"),
        _leg(_account(tenant_id, accounts.ACCRUED_EXPENSES), debit=accrued_value, memo="Goods received not invoiced"),
        _leg(_account(tenant_id, accounts.ACCOUNTS_PAYABLE), credit=total, memo="Vendor bill"),
    ]
    if remainder > 0:
        legs.append(_leg(expense, debit=remainder, memo="Purchase expense"))
    elif remainder < 0:
        legs.append(_leg(expense, credit=-remainder, memo="Purchase price variance"))

    return _post(tenant_id=tenant_id, date=date, reference=reference, memo=memo, legs=legs)


def post_vendor_payment(*, tenant_id, date, reference: str, amount: Decimal, method: str, memo: str = ""):
    """Dr Accounts Payable / Cr Cash|Bank"""
    amount = money(amount)
    legs = [
        _leg(_account(tenant_id, accounts.ACCOUNTS_PAYABLE), debit=amount, memo="Vendor payment"),
        _leg(accounts.resolve_payment_account(tenant_id=tenant_id, method=method), credit=amount, memo="Vendor payment"),
    ]
    return _post(tenant_id=tenant_id, date=date, reference=reference, memo=memo, legs=legs)


# ------------------------------------------------------------
# ORDER-TO-CASH
# ------------------------------------------------------------


def post_sales_invoice(
    *,
    tenant_id,
    date,
    reference: str,
    subtotal: Decimal,
    tax_amount: Decimal,
    total: Decimal,
    cost_value: Decimal,
    memo: str = "",
):
    """
    Dr Accounts Receivable  total
    Cr Sales Revenue        subtotal
    Cr Tax Payable          tax_amount
    Dr COGS / Cr Inventory  cost_value (standard cost of stock issued)
    """
    cost_value = money(cost_value)
    legs = [
        _leg(_account(tenant_id, accounts.ACCOUNTS_RECEIVABLE), debit=total, memo="Sales invoice"),
        _leg(_account(tenant_id, accounts.SALES_REVENUE), credit=subtotal, memo="Sales revenue"),
    ]
    if money(tax_amount) > 0:
        legs.append(_leg(_account(tenant_id, accounts.TAX_PAYABLE), credit=tax_amount, memo="Output tax"))
    if cost_value > 0:
        legs += [
            _leg(_account(tenant_id, accounts.COGS), debit=cost_value, memo="Cost of goods sold"),
            _leg(_account(tenant_id, accounts.INVENTORY), credit=cost_value, memo="Stock issued"),
        ]
    return _post(tenant_id=tenant_id, date=date, reference=reference, memo=memo, legs=legs)


def post_customer_payment(*, tenant_id, date, reference: str, amount: Decimal, method: str, memo: str = ""):
    """Dr Cash|Bank / Cr Accounts Receivable"""
    amount = money(amount)
    legs = [
        _leg(accounts.resolve_payment_account(tenant_id=tenant_id, method=method), debit=amount, memo="Customer payment"),
        _leg(_account(tenant_id, accounts.ACCOUNTS_RECEIVABLE), credit=amount, memo="Customer payment"),
    ]
    return _post(tenant_id=tenant_id, date=date, reference=reference, memo=memo, legs=legs)


def post_credit_note(
    *,
    tenant_id,
    date,
    reference: str,
    subtotal: Decimal,
    tax_amount: Decimal,
    total: Decimal,
    memo: str = "",
):
    """Reverse of the invoice revenue side: Dr Revenue, Dr Tax Payable / Cr AR."""
    legs = [
        _leg(_account(tenant_id, accounts.SALES_REVENUE), debit=subtotal, memo="Credit note"),
        _leg(_account(tenant_id, accounts.ACCOUNTS_RECEIVABLE), credit=total, memo="Credit note"),
    ]
    if money(tax_amount) > 0:
        legs.append(_leg(_account(tenant_id, accounts.TAX_PAYABLE), debit=tax_amount, memo="Output tax reversal"))
    return _post(tenant_id=tenant_id, date=date, reference=reference, memo=memo, legs=legs)
