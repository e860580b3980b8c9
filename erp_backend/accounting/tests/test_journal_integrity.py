# accounting/tests/test_journal_integrity.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.journal import JournalEntry, JournalLine
from accounting.services.exceptions import (
    DuplicateReferenceError,
    FiscalYearLockedError,
    JournalEntryCreationError,
)
from accounting.services.fiscal_year_service import (
    create_fiscal_year,
    lock_fiscal_year,
    unlock_fiscal_year,
)
from accounting.services.journal_entry_service import (
    post_journal_entry,
    post_journal_entry_for_date,
)
from core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidRangeError,
    NotFoundError,
    UnbalancedEntryError,
)
from core.testing import account, account_balance, make_tenant, seed_ledger


class JournalIntegrityTests(TestCase):
    """
    Ledger guarantees.

    GUARANTEES:
    - Accepted entries always balance (tolerance 0.01)
    - Locked fiscal years reject postings; locking keeps existing entries
    - Dates outside the fiscal year are rejected
    - References are idempotency keys within a tenant
    - Entries and lines are immutable
    """

    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2023)
        self.fy = create_fiscal_year(
            tenant_id=self.tenant.id,
            name="Calendar 2025",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 12, 31),
        )
        self.cash = account(self.tenant, "1000")
        self.revenue = account(self.tenant, "4000")

    def _lines(self, debit="100.00", credit="100.00"):
        return [
            {"account_id": self.cash.id, "debit": Decimal(debit)},
            {"account_id": self.revenue.id, "credit": Decimal(credit)},
        ]

    def _post(self, *, on=date(2025, 6, 1), lines=None, reference=None):
        return post_journal_entry(
            tenant_id=self.tenant.id,
            fiscal_year_id=self.fy.id,
            date=on,
            lines=lines or self._lines(),
            reference=reference,
        )

    # --------------------------------------------------
    # Scenario: post, then lock
    # --------------------------------------------------

    def test_post_then_lock_rejects_further_entries(self):
        entry = self._post()
        self.assertEqual(entry.lines.count(), 2)
        self.assertEqual(account_balance(self.tenant, "1000"), Decimal("100.00"))

        lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=self.fy.id)

        with self.assertRaises(ForbiddenError):
            self._post(on=date(2025, 7, 1))

        # locking never rewrites or deletes what was posted
        self.assertTrue(JournalEntry.objects.filter(id=entry.id).exists())
        self.assertEqual(account_balance(self.tenant, "1000"), Decimal("100.00"))

    def test_locked_error_is_fiscal_year_specific(self):
        lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=self.fy.id)
        with self.assertRaises(FiscalYearLockedError):
            self._post()

    def test_lock_is_checked_before_line_shape(self):
        lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=self.fy.id)
        with self.assertRaises(FiscalYearLockedError):
            self._post(lines=[{"account_id": self.cash.id, "debit": "10"}])

    def test_missing_fiscal_year_is_checked_before_line_shape(self):
        with self.assertRaises(NotFoundError):
            post_journal_entry(
                tenant_id=self.tenant.id,
                fiscal_year_id=999999,
                date=date(2025, 6, 1),
                lines=[{"account_id": self.cash.id, "debit": "10"}],
            )

    def test_date_range_is_checked_before_line_shape(self):
        with self.assertRaises(InvalidRangeError):
            self._post(on=date(2026, 1, 1), lines=[{"account_id": self.cash.id, "debit": "10"}])

    def test_unlock_allows_posting_again(self):
        lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=self.fy.id)
        lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=self.fy.id)
        unlock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=self.fy.id)

        self._post()
        self.assertEqual(JournalEntry.objects.filter(tenant=self.tenant).count(), 1)

    # --------------------------------------------------
    # Validation
    # --------------------------------------------------

    def test_unbalanced_entry_rejected(self):
        with self.assertRaises(UnbalancedEntryError):
            self._post(lines=self._lines(debit="100.00", credit="99.00"))
        self.assertFalse(JournalEntry.objects.exists())

    def test_difference_within_tolerance_is_accepted(self):
        entry = self._post(lines=self._lines(debit="100.00", credit="99.99"))
        self.assertIsNotNone(entry.pk)

    def test_date_outside_fiscal_year_rejected(self):
        with self.assertRaises(InvalidRangeError):
            self._post(on=date(2026, 1, 1))

    def test_single_line_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post(lines=[{"account_id": self.cash.id, "debit": "10"}])

    def test_negative_amount_rejected(self):
        with self.assertRaises(InvalidInputError):
            self._post(
                lines=[
                    {"account_id": self.cash.id, "debit": "-10"},
                    {"account_id": self.revenue.id, "credit": "-10"},
                ]
            )

    def test_zero_line_rejected(self):
        with self.assertRaises(InvalidInputError):
            self._post(
                lines=[
                    {"account_id": self.cash.id, "debit": "0"},
                    {"account_id": self.revenue.id, "credit": "0"},
                ]
            )

    def test_amount_over_column_limit_rejected(self):
        with self.assertRaises(InvalidInputError):
            self._post(lines=self._lines(debit="1000000000000.00", credit="1000000000000.00"))
        self.assertFalse(JournalEntry.objects.exists())

    def test_inactive_account_rejected(self):
        self.cash.is_active = False
        self.cash.save(update_fields=["is_active", "updated_at"])
        with self.assertRaises(InvalidInputError):
            self._post()

    def test_other_tenant_account_is_not_found(self):
        other = make_tenant("Other Co")
        seed_ledger(other)
        foreign_cash = account(other, "1000")

        with self.assertRaises(NotFoundError):
            self._post(
                lines=[
                    {"account_id": foreign_cash.id, "debit": "100"},
                    {"account_id": self.revenue.id, "credit": "100"},
                ]
            )

    def test_missing_fiscal_year_is_not_found(self):
        with self.assertRaises(NotFoundError):
            post_journal_entry(
                tenant_id=self.tenant.id,
                fiscal_year_id=999999,
                date=date(2025, 6, 1),
                lines=self._lines(),
            )

    def test_missing_tenant_is_forbidden(self):
        with self.assertRaises(ForbiddenError):
            post_journal_entry(
                tenant_id=None,
                fiscal_year_id=self.fy.id,
                date=date(2025, 6, 1),
                lines=self._lines(),
            )

    def test_duplicate_reference_rejected(self):
        self._post(reference="MANUAL-1")
        with self.assertRaises(DuplicateReferenceError):
            self._post(reference="MANUAL-1")
        self.assertEqual(JournalEntry.objects.filter(reference="MANUAL-1").count(), 1)

    def test_same_reference_allowed_in_other_tenant(self):
        self._post(reference="MANUAL-1")

        other = make_tenant("Other Co")
        seed_ledger(other, year=2025)
        post_journal_entry_for_date(
            tenant_id=other.id,
            date=date(2025, 6, 1),
            lines=[
                {"account": account(other, "1000"), "debit": "5"},
                {"account": account(other, "4000"), "credit": "5"},
            ],
            reference="MANUAL-1",
        )
        self.assertEqual(JournalEntry.objects.filter(reference="MANUAL-1").count(), 2)

    def test_amounts_round_half_up(self):
        entry = self._post(lines=self._lines(debit="10.005", credit="10.005"))
        debit_line = entry.lines.get(account=self.cash)
        self.assertEqual(debit_line.debit, Decimal("10.01"))

    # --------------------------------------------------
    # Immutability
    # --------------------------------------------------

    def test_entries_are_immutable(self):
        entry = self._post()
        entry.memo = "edited"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_lines_are_immutable(self):
        entry = self._post()
        line = entry.lines.first()
        line.debit = Decimal("1.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()
        self.assertEqual(JournalLine.objects.filter(entry=entry).count(), 2)

    # --------------------------------------------------
    # Date-resolved posting
    # --------------------------------------------------

    def test_post_for_date_resolves_fiscal_year(self):
        entry = post_journal_entry_for_date(
            tenant_id=self.tenant.id,
            date=date(2023, 3, 15),
            lines=self._lines(),
        )
        self.assertEqual(entry.fiscal_year.name, "FY 2023")

    def test_post_for_date_without_fiscal_year(self):
        with self.assertRaises(NotFoundError):
            post_journal_entry_for_date(
                tenant_id=self.tenant.id,
                date=date(2030, 1, 1),
                lines=self._lines(),
            )
