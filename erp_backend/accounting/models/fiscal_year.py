# accounting/models/fiscal_year.py

"""
======================================================
PATH: accounting/models/fiscal_year.py
======================================================
FISCAL YEAR MODEL

A bounded accounting period owned by one tenant.

Hard rules:
- start_date < end_date
- fiscal years of one tenant never overlap
- while is_locked, no journal entry dated inside the range may be created
  (enforced by journal_entry_service under a row lock, never cached)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class FiscalYear(models.Model):
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="fiscal_years",
    )

    name = models.CharField(max_length=100)
    start_date = models.DateField()
    end_date = models.DateField()

    is_locked = models.BooleanField(default=False)
    locked_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["tenant", "start_date", "end_date"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "name"],
                name="uniq_fiscal_year_tenant_name",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="chk_fiscal_year_end_gt_start",
            ),
        ]
        verbose_name = "Fiscal Year"
        verbose_name_plural = "Fiscal Years"

    def __str__(self):
        state = "locked" if self.is_locked else "open"
        return f"{self.name} ({self.start_date} → {self.end_date}, {state})"

    def contains(self, value) -> bool:
        return self.start_date <= value <= self.end_date

    def overlapping(self):
        qs = FiscalYear.objects.filter(
            tenant_id=self.tenant_id,
            start_date__lte=self.end_date,
            end_date__gte=self.start_date,
        )
        if self.pk:
            qs = qs.exclude(pk=self.pk)
        return qs

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Fiscal year name is required"})

        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValidationError({"end_date": "end_date must be after start_date"})

        if self.tenant_id and self.start_date and self.end_date and self.overlapping().exists():
            raise ValidationError("This fiscal year overlaps an existing fiscal year")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
