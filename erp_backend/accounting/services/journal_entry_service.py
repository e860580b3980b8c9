# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalLine
- Enforce sum(debit) == sum(credit) (tolerance 0.01)
- Enforce fiscal year existence, lock state and date range
- Enforce idempotency via reference (prevents double-posting)
- Guarantee atomicity

Manual entries and every document posting (bills, invoices, credit notes,
payments, stock valuation) pass through post_journal_entry. There is no
bypass.

Check order:
  1) fiscal year exists for tenant           -> NotFoundError
  2) fiscal year not locked (row-locked read) -> FiscalYearLockedError (403)
  3) date inside [start_date, end_date]       -> InvalidRangeError
  4) line shape (accounts resolve in tenant)  -> JournalEntryCreationError / NotFoundError
  5) |sum(debit) - sum(credit)| <= tolerance  -> UnbalancedEntryError
  6) reference unused in tenant               -> DuplicateReferenceError (409)
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalLine
from accounting.services.exceptions import (
    DuplicateReferenceError,
    FiscalYearLockedError,
    JournalEntryCreationError,
)
from accounting.services.fiscal_year_service import find_fiscal_year_for_date, get_fiscal_year
from core.errors import InvalidInputError, InvalidRangeError, NotFoundError, UnbalancedEntryError
from core.money import ZERO, check_money_limit, money
from tenants.context import require_tenant_id

logger = logging.getLogger("accounting")

MIN_LINES = 2


def _balance_tolerance() -> Decimal:
    return money(getattr(settings, "ERP_BALANCE_TOLERANCE", "0.01"))


def _normalize_reference(reference) -> str | None:
    if reference is None:
        return None
    ref = str(reference).strip()
    return ref or None


def _resolve_line_account(*, tenant_id, line: dict, idx: int) -> Account:
    account = line.get("account")
    if account is not None:
        if str(account.tenant_id) != str(tenant_id):
            raise NotFoundError(f"Line {idx}: account not found")
        return account

    account_id = line.get("account_id")
    if account_id in (None, ""):
        raise JournalEntryCreationError(f"Line {idx}: account is required")

    try:
        return Account.objects.get(id=account_id, tenant_id=tenant_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Line {idx}: account not found") from exc


def _normalize_lines(*, tenant_id, lines) -> list[dict]:
    if not lines or len(lines) < MIN_LINES:
        raise JournalEntryCreationError("Journal entry must have at least two lines")

    normalized: list[dict] = []
    for idx, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise JournalEntryCreationError(f"Line {idx} must be an object/dict")

        account = _resolve_line_account(tenant_id=tenant_id, line=line, idx=idx)
        if not account.is_active:
            raise JournalEntryCreationError(f"Line {idx}: account {account.code} is inactive")

        debit = check_money_limit(money(line.get("debit")), label=f"Line {idx}: debit")
        credit = check_money_limit(money(line.get("credit")), label=f"Line {idx}: credit")

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError(f"Line {idx}: amounts cannot be negative")
        if debit == 0 and credit == 0:
            raise JournalEntryCreationError(f"Line {idx}: must have a debit or a credit amount")

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "memo": (line.get("memo") or "").strip()[:255],
            }
        )
    return normalized


@transaction.atomic
def post_journal_entry(
    *,
    tenant_id,
    fiscal_year_id,
    date,
    lines: list,
    reference: str | None = None,
    memo: str = "",
) -> JournalEntry:
    """
    lines: [{"account_id" | "account", "debit", "credit", "memo"?}, ...]
    """
    require_tenant_id(tenant_id)
    if date is None:
        raise InvalidInputError("Journal entry date is required")

    # Row lock: serializes with lock_fiscal_year / unlock_fiscal_year
    fiscal_year = get_fiscal_year(
        tenant_id=tenant_id, fiscal_year_id=fiscal_year_id, for_update=True
    )

    if fiscal_year.is_locked:
        logger.warning(
            "Posting rejected: fiscal year locked",
            extra={"tenant_id": str(tenant_id), "fiscal_year": fiscal_year.name, "date": str(date)},
        )
        raise FiscalYearLockedError(
            f"Fiscal year {fiscal_year.name} is locked; no entries can be posted"
        )

    if not fiscal_year.contains(date):
        raise InvalidRangeError(
            f"Entry date {date} is outside fiscal year {fiscal_year.name} "
            f"({fiscal_year.start_date} to {fiscal_year.end_date})"
        )

    normalized = _normalize_lines(tenant_id=tenant_id, lines=lines)
    reference = _normalize_reference(reference)

    total_debit = money(sum((l["debit"] for l in normalized), ZERO))
    total_credit = money(sum((l["credit"] for l in normalized), ZERO))
    if abs(total_debit - total_credit) > _balance_tolerance():
        raise UnbalancedEntryError(
            f"Debits ({total_debit}) must equal credits ({total_credit})",
            total_debit=str(total_debit),
            total_credit=str(total_credit),
        )

    if reference and JournalEntry.objects.filter(tenant_id=tenant_id, reference=reference).exists():
        raise DuplicateReferenceError(f"Journal entry already exists for reference {reference}")

    try:
        with transaction.atomic():
            entry = JournalEntry.objects.create(
                tenant_id=tenant_id,
                fiscal_year=fiscal_year,
                date=date,
                reference=reference,
                memo=memo or "",
            )
    except IntegrityError as exc:
        if reference and JournalEntry.objects.filter(tenant_id=tenant_id, reference=reference).exists():
            raise DuplicateReferenceError(
                f"Journal entry already exists for reference {reference}"
            ) from exc
        raise

    JournalLine.objects.bulk_create(
        [
            JournalLine(
                entry=entry,
                account=l["account"],
                debit=l["debit"],
                credit=l["credit"],
                memo=l["memo"],
            )
            for l in normalized
        ]
    )

    logger.info(
        "Journal entry posted",
        extra={
            "tenant_id": str(tenant_id),
            "journal_entry_id": entry.id,
            "reference": reference,
            "fiscal_year": fiscal_year.name,
            "total": str(total_debit),
        },
    )
    return entry


def post_journal_entry_for_date(
    *,
    tenant_id,
    date,
    lines: list,
    reference: str | None = None,
    memo: str = "",
) -> JournalEntry:
    """
    Document postings know a date, not a fiscal year id.
    Resolve the covering fiscal year, then use the same validation path.
    """
    fiscal_year = find_fiscal_year_for_date(tenant_id=tenant_id, on_date=date)
    return post_journal_entry(
        tenant_id=tenant_id,
        fiscal_year_id=fiscal_year.id,
        date=date,
        lines=lines,
        reference=reference,
        memo=memo,
    )


def get_journal_entry(*, tenant_id, journal_entry_id) -> JournalEntry:
    require_tenant_id(tenant_id)
    try:
        return (
            JournalEntry.objects.select_related("fiscal_year")
            .prefetch_related("lines__account")
            .get(id=journal_entry_id, tenant_id=tenant_id)
        )
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Journal entry not found") from exc
