# inventory/models/settings.py

from django.core.exceptions import ValidationError
from django.db import models


class PurchaseStockRecognition(models.TextChoices):
    RECEIPT = "RECEIPT", "On goods receipt"
    BILL = "BILL", "On vendor bill"


class InventorySettings(models.Model):
    """
    Per-tenant inventory policy (one row per tenant, created on first read).

    purchase_stock_recognition:
      RECEIPT -> goods receipts move stock (and value it against GR/IR);
                 bills require a RECEIVED purchase order
      BILL    -> stock is received when the vendor bill is posted;
                 bills may be raised from a CONFIRMED purchase order
    negative_stock_move_types:
      move types allowed to drive a balance below zero (default: none)
    """

    tenant = models.OneToOneField(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="inventory_settings",
    )

    purchase_stock_recognition = models.CharField(
        max_length=10,
        choices=PurchaseStockRecognition.choices,
        default=PurchaseStockRecognition.RECEIPT,
    )
    auto_post_receipts = models.BooleanField(default=True)
    negative_stock_move_types = models.JSONField(default=list, blank=True)
    post_stock_valuation = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Inventory Settings"
        verbose_name_plural = "Inventory Settings"

    def __str__(self):
        return f"Inventory settings – {self.tenant}"

    def allows_negative(self, move_type: str) -> bool:
        return move_type in (self.negative_stock_move_types or [])

    def clean(self):
        from inventory.models.stock import MoveType

        types = self.negative_stock_move_types or []
        if not isinstance(types, list):
            raise ValidationError({"negative_stock_move_types": "Must be a list of move types"})
        unknown = [t for t in types if t not in MoveType.values]
        if unknown:
            raise ValidationError(
                {"negative_stock_move_types": f"Unknown move types: {', '.join(map(str, unknown))}"}
            )

    def save(self, *args, **kwargs):
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)
