# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY + JOURNAL LINE MODELS

JournalEntry is the header of one balanced accounting transaction;
JournalLine is one debit and/or credit against a single account.

Guarantees:
- Immutable once created (no updates, no deletes)
- Idempotency via reference uniqueness per tenant (when reference is provided)
- date is the accounting effective date (used for fiscal years and reports)
- Amounts are never negative
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear


class JournalEntry(models.Model):
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    fiscal_year = models.ForeignKey(
        FiscalYear,
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    date = models.DateField(help_text="Accounting effective date")

    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Business reference (BILL:BILL-00001, INV:INV-00003, ...)",
    )

    memo = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["tenant", "date"]),
            models.Index(fields=["tenant", "fiscal_year"]),
            models.Index(fields=["reference"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "reference"],
                condition=Q(reference__isnull=False) & ~Q(reference=""),
                name="uniq_journal_tenant_reference_not_blank",
            )
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        ref = self.reference or f"#{self.pk}"
        return f"JournalEntry {ref} – {self.date}"

    def clean(self):
        if self.reference is not None:
            ref = str(self.reference).strip()
            self.reference = ref or None
        self.memo = (self.memo or "").strip()

        if self.fiscal_year_id and self.fiscal_year.tenant_id != self.tenant_id:
            raise ValidationError({"fiscal_year": "Fiscal year belongs to another tenant"})

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")


class JournalLine(models.Model):
    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    memo = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["entry"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=Decimal("0.00")) & Q(credit__gte=Decimal("0.00")),
                name="chk_journal_line_amounts_nonnegative",
            ),
        ]
        verbose_name = "Journal Line"
        verbose_name_plural = "Journal Lines"

    def __str__(self):
        return f"{self.account} Dr {self.debit} / Cr {self.credit}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalLine records are immutable and cannot be modified")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalLine records are immutable and cannot be deleted")
