# inventory/models/warehouse.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Warehouse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="warehouses",
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=150)
    address = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "code"],
                name="uniq_warehouse_tenant_code",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    def clean(self):
        self.code = (self.code or "").strip().upper()
        self.name = (self.name or "").strip()
        if not self.code:
            raise ValidationError({"code": "Warehouse code is required"})
        if not self.name:
            raise ValidationError({"name": "Warehouse name is required"})

    def save(self, *args, **kwargs):
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)


class Location(models.Model):
    """
    A stock-holding place inside a warehouse.

    Quarantine locations hold stock that must not be issued or sold;
    they are never picked as the default location.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="stock_locations",
    )
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="locations",
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=150)
    is_quarantine = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["warehouse__created_at", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["warehouse", "code"],
                name="uniq_location_warehouse_code",
            ),
        ]

    def __str__(self):
        return f"{self.warehouse.code}/{self.code}"

    def clean(self):
        self.code = (self.code or "").strip().upper()
        self.name = (self.name or "").strip()
        if not self.code:
            raise ValidationError({"code": "Location code is required"})
        if not self.name:
            raise ValidationError({"name": "Location name is required"})
        if self.warehouse_id and self.warehouse.tenant_id != self.tenant_id:
            raise ValidationError({"warehouse": "Warehouse belongs to another tenant"})

    def save(self, *args, **kwargs):
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)
