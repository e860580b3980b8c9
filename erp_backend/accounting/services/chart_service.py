# accounting/services/chart_service.py

"""
======================================================
PATH: accounting/services/chart_service.py
======================================================
CHART OF ACCOUNTS SERVICE

Create / rename / re-parent / deactivate accounts of one tenant and seed
the starter chart.

Rules:
- account_type is a closed enum (unknown values are rejected)
- codes are unique per tenant
- parent must belong to the same tenant and share the account type
- the hierarchy never contains cycles
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account, AccountType
from accounting.models.fiscal_year import FiscalYear
from core.errors import ConflictError, InvalidInputError, NotFoundError
from tenants.context import require_tenant_id

logger = logging.getLogger("accounting")

_UNSET = object()

STARTER_ACCOUNTS = [
    ("1000", "Cash", AccountType.ASSET),
    ("1100", "Bank Account", AccountType.ASSET),
    ("1200", "Accounts Receivable", AccountType.ASSET),
    ("1300", "Inventory", AccountType.ASSET),
    ("1400", "Prepaid Expenses", AccountType.ASSET),
    ("2000", "Accounts Payable", AccountType.LIABILITY),
    ("2100", "Accrued Expenses", AccountType.LIABILITY),
    ("2200", "Tax Payable", AccountType.LIABILITY),
    ("2300", "Short-Term Loans", AccountType.LIABILITY),
    ("3000", "Owner Equity", AccountType.EQUITY),
    ("3100", "Retained Earnings", AccountType.EQUITY),
    ("4000", "Sales Revenue", AccountType.REVENUE),
    ("4100", "Service Revenue", AccountType.REVENUE),
    ("4200", "Other Income", AccountType.REVENUE),
    ("5000", "Cost of Goods Sold", AccountType.EXPENSE),
    ("5100", "Purchase Expense", AccountType.EXPENSE),
    ("6000", "Salaries & Wages", AccountType.EXPENSE),
    ("6100", "Rent", AccountType.EXPENSE),
    ("6200", "Utilities", AccountType.EXPENSE),
    ("6300", "Office Supplies", AccountType.EXPENSE),
    ("6400", "Marketing", AccountType.EXPENSE),
    ("6500", "Depreciation", AccountType.EXPENSE),
    ("6900", "Miscellaneous Expense", AccountType.EXPENSE),
]


def _validate_account_type(account_type: str) -> str:
    value = (account_type or "").strip().upper()
    if value not in AccountType.values:
        raise InvalidInputError(
            f"Invalid account type {account_type!r}. "
            f"Expected one of {', '.join(AccountType.values)}"
        )
    return value


def get_account(*, tenant_id, account_id) -> Account:
    require_tenant_id(tenant_id)
    try:
        return Account.objects.select_related("parent").get(id=account_id, tenant_id=tenant_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Account not found") from exc


def _resolve_parent(*, tenant_id, parent_id, account_type: str) -> Account | None:
    if parent_id in (None, ""):
        return None

    try:
        parent = Account.objects.get(id=parent_id, tenant_id=tenant_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Parent account not found") from exc

    if parent.account_type != account_type:
        raise InvalidInputError(
            f"Parent account {parent.code} is {parent.account_type}; "
            f"child must have the same type ({account_type})"
        )
    return parent


@transaction.atomic
def create_account(
    *,
    tenant_id,
    code: str,
    name: str,
    account_type: str,
    parent_id=None,
    is_active: bool = True,
) -> Account:
    require_tenant_id(tenant_id)

    code = (code or "").strip()
    name = (name or "").strip()
    if not code:
        raise InvalidInputError("Account code is required")
    if not name:
        raise InvalidInputError("Account name is required")

    account_type = _validate_account_type(account_type)
    parent = _resolve_parent(tenant_id=tenant_id, parent_id=parent_id, account_type=account_type)

    if Account.objects.filter(tenant_id=tenant_id, code=code).exists():
        raise ConflictError(f"Account code {code} already exists")

    try:
        with transaction.atomic():
            account = Account.objects.create(
                tenant_id=tenant_id,
                code=code,
                name=name,
                account_type=account_type,
                parent=parent,
                is_active=is_active,
            )
    except IntegrityError as exc:
        raise ConflictError(f"Account code {code} already exists") from exc

    logger.info(
        "Account created",
        extra={"tenant_id": str(tenant_id), "account_code": code, "account_type": account_type},
    )
    return account


@transaction.atomic
def update_account(
    *,
    tenant_id,
    account_id,
    name: str | None = None,
    parent_id=_UNSET,
    is_active: bool | None = None,
) -> Account:
    """
    Rename, re-parent, deactivate or reactivate an account.
    Pass parent_id=None to detach from the current parent.
    """
    require_tenant_id(tenant_id)
    try:
        account = Account.objects.select_for_update().get(id=account_id, tenant_id=tenant_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Account not found") from exc

    update_fields = ["updated_at"]

    if name is not None:
        name = name.strip()
        if not name:
            raise InvalidInputError("Account name is required")
        account.name = name
        update_fields.append("name")

    if parent_id is not _UNSET:
        if parent_id not in (None, "") and str(parent_id) == str(account.pk):
            raise InvalidInputError("An account cannot be its own parent")

        parent = _resolve_parent(
            tenant_id=tenant_id, parent_id=parent_id, account_type=account.account_type
        )
        if parent is not None and account.pk in parent.ancestor_ids():
            raise InvalidInputError("Account hierarchy cannot contain cycles")

        account.parent = parent
        update_fields.append("parent")

    if is_active is not None:
        account.is_active = bool(is_active)
        update_fields.append("is_active")

    account.save(update_fields=update_fields)

    logger.info(
        "Account updated",
        extra={
            "tenant_id": str(tenant_id),
            "account_code": account.code,
            "fields": update_fields,
        },
    )
    return account


def rename_account(*, tenant_id, account_id, name: str) -> Account:
    return update_account(tenant_id=tenant_id, account_id=account_id, name=name)


def deactivate_account(*, tenant_id, account_id) -> Account:
    return update_account(tenant_id=tenant_id, account_id=account_id, is_active=False)


def list_accounts(*, tenant_id, include_inactive: bool = False):
    require_tenant_id(tenant_id)
    qs = Account.objects.filter(tenant_id=tenant_id).select_related("parent").order_by("code")
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs


@transaction.atomic
def seed_starter_accounts(*, tenant_id, today: date | None = None) -> dict:
    """
    Idempotent bootstrap of the starter chart + FY <current>/<next>.
    Existing accounts are never renamed or retyped.
    """
    require_tenant_id(tenant_id)

    created_accounts = 0
    for code, name, account_type in STARTER_ACCOUNTS:
        _, created = Account.objects.get_or_create(
            tenant_id=tenant_id,
            code=code,
            defaults={"name": name, "account_type": account_type, "is_active": True},
        )
        if created:
            created_accounts += 1

    today = today or timezone.localdate()
    created_years = []
    for year in (today.year, today.year + 1):
        start, end = date(year, 1, 1), date(year, 12, 31)
        overlaps = FiscalYear.objects.filter(
            tenant_id=tenant_id, start_date__lte=end, end_date__gte=start
        ).exists()
        name = f"FY {year}"
        if overlaps or FiscalYear.objects.filter(tenant_id=tenant_id, name=name).exists():
            continue
        FiscalYear.objects.create(tenant_id=tenant_id, name=name, start_date=start, end_date=end)
        created_years.append(name)

    logger.info(
        "Starter chart seeded",
        extra={
            "tenant_id": str(tenant_id),
            "accounts_created": created_accounts,
            "fiscal_years_created": created_years,
        },
    )
    return {
        "accounts_created": created_accounts,
        "accounts_total": Account.objects.filter(tenant_id=tenant_id).count(),
        "fiscal_years_created": created_years,
    }
