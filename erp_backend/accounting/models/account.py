# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class AccountType(models.TextChoices):
    ASSET = "ASSET", "Asset"
    LIABILITY = "LIABILITY", "Liability"
    EQUITY = "EQUITY", "Equity"
    REVENUE = "REVENUE", "Revenue"
    EXPENSE = "EXPENSE", "Expense"


DEBIT_NORMAL_TYPES = frozenset({AccountType.ASSET, AccountType.EXPENSE})


class Account(models.Model):
    """
    A single account in a tenant's Chart of Accounts.

    Guarantees:
    - Account codes are unique per tenant
    - Code + name are normalized (trimmed)
    - parent (if any) belongs to the same tenant; cycles are forbidden
    - Accounts referenced by journal lines are never physically deleted
    """

    ASSET = AccountType.ASSET
    LIABILITY = AccountType.LIABILITY
    EQUITY = AccountType.EQUITY
    REVENUE = AccountType.REVENUE
    EXPENSE = AccountType.EXPENSE

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["tenant", "code"]),
            models.Index(fields=["tenant", "account_type"]),
            models.Index(fields=["is_active"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "code"],
                name="uniq_account_tenant_code",
            ),
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def is_debit_normal(self) -> bool:
        return self.account_type in DEBIT_NORMAL_TYPES

    def ancestor_ids(self) -> list:
        seen = []
        node = self.parent
        while node is not None:
            if node.pk in seen:
                break
            seen.append(node.pk)
            node = node.parent
        return seen

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")
        if self.account_type not in AccountType.values:
            raise ValidationError({"account_type": f"Unknown account type {self.account_type!r}"})

        if self.parent_id:
            if self.pk and self.parent_id == self.pk:
                raise ValidationError({"parent": "An account cannot be its own parent"})
            if self.parent.tenant_id != self.tenant_id:
                raise ValidationError({"parent": "Parent account belongs to another tenant"})
            if self.pk and self.pk in self.parent.ancestor_ids():
                raise ValidationError({"parent": "Account hierarchy cannot contain cycles"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.journal_lines.exists():
            raise ValidationError(
                "Accounts referenced by journal lines cannot be deleted; deactivate instead"
            )
        return super().delete(*args, **kwargs)
