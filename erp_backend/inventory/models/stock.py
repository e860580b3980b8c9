# inventory/models/stock.py

"""
======================================================
PATH: inventory/models/stock.py
======================================================
INVENTORY LEDGER

StockMove       one recorded change (or transfer) of quantity
StockMoveLine   product + location(s) + quantity
StockBalance    materialized on-hand per (product, location)

GUARANTEES:
- A StockMove is a draft until posted; posting happens once
  (stock_move_service.post_stock_move)
- Posted moves and their lines are immutable
- StockBalance is changed ONLY by posting a move, under row locks
- unit_cost on a line is the product's standard_cost snapshot at posting
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class MoveType(models.TextChoices):
    RECEIPT = "RECEIPT", "Receipt"
    ISSUE = "ISSUE", "Issue"
    ADJUSTMENT = "ADJUSTMENT", "Adjustment"
    TRANSFER = "TRANSFER", "Transfer"
    QUARANTINE = "QUARANTINE", "Quarantine"


# move types whose lines reference a single `location`
SINGLE_LOCATION_TYPES = frozenset({MoveType.RECEIPT, MoveType.ISSUE, MoveType.ADJUSTMENT})
# move types whose lines reference from_location -> to_location
TWO_LOCATION_TYPES = frozenset({MoveType.TRANSFER, MoveType.QUARANTINE})


class StockMove(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="stock_moves",
    )

    number = models.CharField(max_length=32)
    move_type = models.CharField(max_length=12, choices=MoveType.choices)
    date = models.DateField(default=timezone.localdate)
    memo = models.TextField(blank=True, default="")

    # e.g. "GR-00003", "BILL-00007", "INV-00012" for document-generated moves
    source_reference = models.CharField(max_length=64, blank=True, default="")

    is_posted = models.BooleanField(default=False)
    posted_at = models.DateTimeField(null=True, blank=True)

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["tenant", "date"]),
            models.Index(fields=["tenant", "move_type"]),
            models.Index(fields=["tenant", "is_posted"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "number"],
                name="uniq_stock_move_tenant_number",
            ),
        ]

    def __str__(self):
        state = "posted" if self.is_posted else "draft"
        return f"{self.number} ({self.move_type}, {state})"

    def clean(self):
        if self.move_type not in MoveType.values:
            raise ValidationError({"move_type": f"Unknown move type {self.move_type!r}"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = StockMove.objects.filter(pk=self.pk).values_list("is_posted", flat=True).first()
            if original:
                raise ValidationError("Posted stock moves are immutable")
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.is_posted:
            raise ValidationError("Posted stock moves cannot be deleted")
        return super().delete(*args, **kwargs)


class StockMoveLine(models.Model):
    move = models.ForeignKey(
        StockMove,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        related_name="stock_move_lines",
    )

    location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    from_location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    to_location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    # signed only for ADJUSTMENT
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    memo = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(quantity=0),
                name="chk_stock_move_line_quantity_not_zero",
            ),
        ]

    def __str__(self):
        return f"{self.move.number}: {self.product.sku} x {self.quantity}"


class StockBalance(models.Model):
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="stock_balances",
    )
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        related_name="stock_balances",
    )
    location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        related_name="stock_balances",
    )

    quantity_on_hand = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("0.000"))

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product__sku", "location__code"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "location"],
                name="uniq_stock_balance_product_location",
            ),
        ]

    def __str__(self):
        return f"{self.product.sku} @ {self.location}: {self.quantity_on_hand}"
