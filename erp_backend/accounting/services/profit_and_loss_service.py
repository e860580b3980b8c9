# accounting/services/profit_and_loss_service.py

"""
PROFIT & LOSS SERVICE (INCOME STATEMENT)

Read-only aggregation over immutable journal lines of ONE fiscal year.

Key rules:
- revenue per account = Σcredit − Σdebit
- expense per account = Σdebit − Σcredit
- net_income = total_revenue − total_expenses
- a missing fiscal year (or one owned by another tenant) is NotFound
"""

from __future__ import annotations

from accounting.models.account import AccountType
from accounting.services.fiscal_year_service import get_fiscal_year
from accounting.services.ledger_service import account_totals
from core.money import ZERO, money


def _section(rows, account_type):
    items = [
        {
            "account_id": r["account_id"],
            "account_code": r["account_code"],
            "account_name": r["account_name"],
            "amount": r["balance"],
        }
        for r in rows
        if r["account_type"] == account_type
    ]
    return items, money(sum((i["amount"] for i in items), ZERO))


def get_profit_and_loss(*, tenant_id, fiscal_year_id) -> dict:
    fiscal_year = get_fiscal_year(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id)

    rows = account_totals(
        tenant_id=tenant_id,
        fiscal_year_id=fiscal_year.id,
        account_types=(AccountType.REVENUE, AccountType.EXPENSE),
    )

    revenue, total_revenue = _section(rows, AccountType.REVENUE)
    expenses, total_expenses = _section(rows, AccountType.EXPENSE)

    return {
        "fiscal_year": fiscal_year.name,
        "start_date": fiscal_year.start_date,
        "end_date": fiscal_year.end_date,
        "revenue": revenue,
        "expenses": expenses,
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "net_income": money(total_revenue - total_expenses),
    }
