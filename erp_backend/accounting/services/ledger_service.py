# accounting/services/ledger_service.py

"""
======================================================
PATH: accounting/services/ledger_service.py
======================================================
GENERAL LEDGER (READ-ONLY)

- Lines ordered by entry date, then creation order (entry id, line id)
- Running balance per account:
    debit-normal (ASSET, EXPENSE):  Σdebit − Σcredit
    credit-normal (everything else): Σcredit − Σdebit
- Always tenant-scoped; filters are optional
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Q, Sum

from accounting.models.account import Account
from accounting.models.journal import JournalLine
from accounting.services.fiscal_year_service import get_fiscal_year
from core.errors import InvalidRangeError, NotFoundError
from core.money import ZERO, money
from tenants.context import require_tenant_id


def signed_balance(*, account_type: str, debit: Decimal, credit: Decimal) -> Decimal:
    debit = money(debit)
    credit = money(credit)
    if account_type in (Account.ASSET, Account.EXPENSE):
        return money(debit - credit)
    return money(credit - debit)


def _ledger_lines(*, tenant_id, account_id=None, fiscal_year_id=None, start_date=None, end_date=None):
    require_tenant_id(tenant_id)

    if start_date and end_date and end_date < start_date:
        raise InvalidRangeError("end_date must not be before start_date")

    qs = JournalLine.objects.select_related("entry", "account").filter(entry__tenant_id=tenant_id)

    if account_id is not None:
        if not Account.objects.filter(id=account_id, tenant_id=tenant_id).exists():
            raise NotFoundError("Account not found")
        qs = qs.filter(account_id=account_id)

    if fiscal_year_id is not None:
        fy = get_fiscal_year(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id)
        qs = qs.filter(entry__fiscal_year=fy)

    if start_date:
        qs = qs.filter(entry__date__gte=start_date)
    if end_date:
        qs = qs.filter(entry__date__lte=end_date)

    return qs.order_by("account__code", "entry__date", "entry__created_at", "entry_id", "id")


def get_ledger(*, tenant_id, account_id=None, fiscal_year_id=None, start_date=None, end_date=None) -> list[dict]:
    """
    Returns one group per account:
    {
      "account_id", "account_code", "account_name", "account_type",
      "lines": [{entry_id, date, reference, memo, debit, credit, balance}, ...],
      "total_debit", "total_credit", "balance"
    }
    """
    groups: dict = {}

    for line in _ledger_lines(
        tenant_id=tenant_id,
        account_id=account_id,
        fiscal_year_id=fiscal_year_id,
        start_date=start_date,
        end_date=end_date,
    ):
        acc = line.account
        group = groups.get(acc.id)
        if group is None:
            group = groups[acc.id] = {
                "account_id": acc.id,
                "account_code": acc.code,
                "account_name": acc.name,
                "account_type": acc.account_type,
                "lines": [],
                "total_debit": ZERO,
                "total_credit": ZERO,
                "balance": ZERO,
            }

        group["total_debit"] = money(group["total_debit"] + line.debit)
        group["total_credit"] = money(group["total_credit"] + line.credit)
        group["balance"] = signed_balance(
            account_type=acc.account_type,
            debit=group["total_debit"],
            credit=group["total_credit"],
        )
        group["lines"].append(
            {
                "entry_id": line.entry_id,
                "date": line.entry.date,
                "reference": line.entry.reference,
                "memo": line.memo or line.entry.memo,
                "debit": line.debit,
                "credit": line.credit,
                "balance": group["balance"],
            }
        )

    return list(groups.values())


def get_account_balance(*, tenant_id, account_id, fiscal_year_id=None, start_date=None, end_date=None) -> Decimal:
    require_tenant_id(tenant_id)
    try:
        account = Account.objects.get(id=account_id, tenant_id=tenant_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Account not found") from exc

    filters = Q(entry__tenant_id=tenant_id, account=account)
    if fiscal_year_id is not None:
        fy = get_fiscal_year(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id)
        filters &= Q(entry__fiscal_year=fy)
    if start_date:
        filters &= Q(entry__date__gte=start_date)
    if end_date:
        filters &= Q(entry__date__lte=end_date)

    totals = JournalLine.objects.filter(filters).aggregate(debit=Sum("debit"), credit=Sum("credit"))
    return signed_balance(
        account_type=account.account_type,
        debit=totals["debit"] or ZERO,
        credit=totals["credit"] or ZERO,
    )


def account_totals(*, tenant_id, fiscal_year_id=None, end_date=None, account_types=None) -> list[dict]:
    """
    Bulk aggregate (one query) of debit / credit per account.
    Used by the trial balance, P&L and balance sheet.
    """
    qs = JournalLine.objects.filter(entry__tenant_id=tenant_id)
    if fiscal_year_id is not None:
        qs = qs.filter(entry__fiscal_year_id=fiscal_year_id)
    if end_date is not None:
        qs = qs.filter(entry__date__lte=end_date)
    if account_types:
        qs = qs.filter(account__account_type__in=list(account_types))

    rows = (
        qs.values("account_id", "account__code", "account__name", "account__account_type")
        .annotate(debit=Sum("debit"), credit=Sum("credit"))
        .order_by("account__code")
    )

    out = []
    for r in rows:
        debit = money(r["debit"] or ZERO)
        credit = money(r["credit"] or ZERO)
        out.append(
            {
                "account_id": r["account_id"],
                "account_code": r["account__code"],
                "account_name": r["account__name"],
                "account_type": r["account__account_type"],
                "debit": debit,
                "credit": credit,
                "balance": signed_balance(
                    account_type=r["account__account_type"], debit=debit, credit=credit
                ),
            }
        )
    return out
