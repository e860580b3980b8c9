# tenants/models.py

"""
TENANT MODELS

A Tenant (company) exclusively owns every ledger, inventory and
document row. Nothing is shared across tenants.

ModuleAccess records which ERP modules a tenant may call.
"""

from __future__ import annotations

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Tenant(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=80, unique=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_tenant_name_not_blank",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Tenant name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class Module(models.TextChoices):
    ACCOUNTING = "ACCOUNTING", "Accounting"
    INVENTORY = "INVENTORY", "Inventory"
    PURCHASE = "PURCHASE", "Purchase"
    SALES = "SALES", "Sales"


class ModuleAccess(models.Model):
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="module_access",
    )
    module = models.CharField(max_length=20, choices=Module.choices)
    is_enabled = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["module"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "module"],
                name="uniq_module_access_tenant_module",
            ),
        ]
        verbose_name = "Module Access"
        verbose_name_plural = "Module Access"

    def __str__(self):
        state = "on" if self.is_enabled else "off"
        return f"{self.tenant} / {self.module} ({state})"
