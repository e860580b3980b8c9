# accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account of this tenant should be used for this purpose?"

Document postings never hardcode account ids; they ask for a semantic
key (INVENTORY, ACCOUNTS_PAYABLE, ...) which maps to a starter-chart code.

Design goals:
- deterministic
- tenant-safe
- hard-fail on missing setup (so we don't post to wrong accounts)
"""

from __future__ import annotations

import logging

from accounting.models.account import Account
from accounting.services.exceptions import AccountResolutionError
from core.errors import InvalidInputError

logger = logging.getLogger("accounting")

CASH = "CASH"
BANK = "BANK"
ACCOUNTS_RECEIVABLE = "ACCOUNTS_RECEIVABLE"
INVENTORY = "INVENTORY"
ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
ACCRUED_EXPENSES = "ACCRUED_EXPENSES"
TAX_PAYABLE = "TAX_PAYABLE"
RETAINED_EARNINGS = "RETAINED_EARNINGS"
SALES_REVENUE = "SALES_REVENUE"
OTHER_INCOME = "OTHER_INCOME"
COGS = "COGS"
PURCHASE_EXPENSE = "PURCHASE_EXPENSE"

SEMANTIC_CODES = {
    CASH: "1000",
    BANK: "1100",
    ACCOUNTS_RECEIVABLE: "1200",
    INVENTORY: "1300",
    ACCOUNTS_PAYABLE: "2000",
    # GR/IR clearing: goods received, bill not yet posted
    ACCRUED_EXPENSES: "2100",
    TAX_PAYABLE: "2200",
    RETAINED_EARNINGS: "3100",
    SALES_REVENUE: "4000",
    OTHER_INCOME: "4200",
    COGS: "5000",
    PURCHASE_EXPENSE: "5100",
}


def resolve_account(*, tenant_id, key: str) -> Account:
    try:
        code = SEMANTIC_CODES[key]
    except KeyError as exc:
        raise AccountResolutionError(f"Unknown semantic account {key!r}") from exc

    try:
        return Account.objects.get(tenant_id=tenant_id, code=code, is_active=True)
    except Account.DoesNotExist as exc:
        logger.warning(
            "Account resolution failed: account not found",
            extra={"tenant_id": str(tenant_id), "key": key, "account_code": code},
        )
        raise AccountResolutionError(
            f"Account {code} ({key.replace('_', ' ').title()}) is missing or inactive. "
            "Seed the starter chart of accounts first."
        ) from exc


def resolve_payment_account(*, tenant_id, method: str) -> Account:
    m = (method or "CASH").upper().strip()
    if m == "CASH":
        return resolve_account(tenant_id=tenant_id, key=CASH)
    if m in ("BANK", "TRANSFER", "CARD"):
        return resolve_account(tenant_id=tenant_id, key=BANK)
    raise InvalidInputError(f"Invalid payment method {method!r}. Use CASH or BANK.")
