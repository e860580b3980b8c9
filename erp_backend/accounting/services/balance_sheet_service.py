# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET SERVICE

Assets = Liabilities + Equity (+ retained earnings to date)

- Cumulative up to `as_of` (inclusive); all fiscal years
- Retained earnings here means net income (revenue − expenses) to date that
  has not been closed into an equity account; it is reported on its own line
- Numbers are Decimals; is_balanced uses the 0.01 tolerance
"""

from __future__ import annotations

from django.utils import timezone

from accounting.models.account import AccountType
from accounting.services.ledger_service import account_totals
from core.money import ZERO, money
from tenants.context import require_tenant_id


def _items(rows, account_type):
    items = [
        {
            "account_id": r["account_id"],
            "account_code": r["account_code"],
            "account_name": r["account_name"],
            "balance": r["balance"],
        }
        for r in rows
        if r["account_type"] == account_type and r["balance"] != ZERO
    ]
    return items, money(sum((i["balance"] for i in items), ZERO))


def get_balance_sheet(*, tenant_id, as_of=None) -> dict:
    require_tenant_id(tenant_id)
    as_of = as_of or timezone.localdate()

    rows = account_totals(tenant_id=tenant_id, end_date=as_of)

    assets, total_assets = _items(rows, AccountType.ASSET)
    liabilities, total_liabilities = _items(rows, AccountType.LIABILITY)
    equity, total_equity = _items(rows, AccountType.EQUITY)

    revenue = money(sum((r["balance"] for r in rows if r["account_type"] == AccountType.REVENUE), ZERO))
    expenses = money(sum((r["balance"] for r in rows if r["account_type"] == AccountType.EXPENSE), ZERO))
    retained_earnings = money(revenue - expenses)

    total_equity_with_earnings = money(total_equity + retained_earnings)
    total_liabilities_and_equity = money(total_liabilities + total_equity_with_earnings)

    return {
        "as_of": as_of,
        "assets": assets,
        "liabilities": liabilities,
        "equity": equity,
        "retained_earnings": retained_earnings,
        "totals": {
            "assets": total_assets,
            "liabilities": total_liabilities,
            "equity": total_equity_with_earnings,
            "liabilities_and_equity": total_liabilities_and_equity,
        },
        "is_balanced": abs(total_assets - total_liabilities_and_equity) <= money("0.01"),
    }
