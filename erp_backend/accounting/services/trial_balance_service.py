# accounting/services/trial_balance_service.py

from __future__ import annotations

from accounting.services.fiscal_year_service import get_fiscal_year
from accounting.services.ledger_service import account_totals
from core.money import ZERO, money
from tenants.context import require_tenant_id


def get_trial_balance(*, tenant_id, fiscal_year_id=None, as_of=None) -> dict:
    """
    Trial Balance.

    Guarantees:
    - Tenant-scoped; optionally narrowed to one fiscal year and/or a cutoff date
    - Aggregates in bulk (no N+1)
    - Accounts without activity are omitted
    - Returns Decimals (the API layer serializes them)
    """
    require_tenant_id(tenant_id)
    fiscal_year = None
    if fiscal_year_id is not None:
        fiscal_year = get_fiscal_year(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id)

    rows = [
        r
        for r in account_totals(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id, end_date=as_of)
        if r["debit"] != ZERO or r["credit"] != ZERO
    ]

    total_debit = money(sum((r["debit"] for r in rows), ZERO))
    total_credit = money(sum((r["credit"] for r in rows), ZERO))

    return {
        "fiscal_year": fiscal_year.name if fiscal_year else None,
        "as_of": as_of,
        "accounts": rows,
        "totals": {
            "debit": total_debit,
            "credit": total_credit,
            "is_balanced": abs(total_debit - total_credit) <= money("0.01"),
        },
    }
