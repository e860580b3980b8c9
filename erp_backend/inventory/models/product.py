# inventory/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class ProductType(models.TextChoices):
    STOCK = "STOCK", "Stocked item"
    SERVICE = "SERVICE", "Service / non-stock"


class Product(models.Model):
    """
    A tenant's catalog item.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in StockBalance (product x location), changed only by
      posting StockMoves
    - SERVICE products never touch stock; they flow to expense/revenue only

    VALUATION:
    - standard_cost values every stock movement at posting time
      (standard costing; no FIFO / weighted average)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="products",
    )

    sku = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    product_type = models.CharField(
        max_length=10,
        choices=ProductType.choices,
        default=ProductType.STOCK,
    )

    unit_of_measure = models.CharField(max_length=20, default="unit")

    standard_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    sale_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_active", "-created_at"]
        indexes = [
            models.Index(fields=["tenant", "sku"]),
            models.Index(fields=["tenant", "name"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "sku"],
                name="uniq_product_tenant_sku",
            ),
            models.CheckConstraint(
                condition=Q(standard_cost__gte=Decimal("0.00")) & Q(sale_price__gte=Decimal("0.00")),
                name="chk_product_prices_nonnegative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def is_stockable(self) -> bool:
        return self.product_type == ProductType.STOCK

    def clean(self):
        self.sku = (self.sku or "").strip()
        self.name = (self.name or "").strip()

        if not self.sku:
            raise ValidationError({"sku": "SKU is required"})
        if not self.name:
            raise ValidationError({"name": "Product name is required"})
        if self.standard_cost is not None and Decimal(self.standard_cost) < 0:
            raise ValidationError({"standard_cost": "standard_cost cannot be negative"})
        if self.sale_price is not None and Decimal(self.sale_price) < 0:
            raise ValidationError({"sale_price": "sale_price cannot be negative"})

    def save(self, *args, **kwargs):
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)
