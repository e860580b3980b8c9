# core/documents.py

"""
======================================================
PATH: core/documents.py
======================================================
COMMERCIAL DOCUMENT BASES

Abstract models shared by the procurement and sales chains
(requisitions, orders, bills, quotations, invoices, credit notes).

Guarantees:
- Every document is owned by exactly one tenant
- Document numbers are unique per tenant + document table
- Totals are DERIVED from lines:
    subtotal   = sum(round(qty * price, 2))
    tax_amount = round(subtotal * tax_rate, 2)
    total      = subtotal + tax_amount
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.errors import InvalidInputError, NotFoundError
from core.money import ZERO, check_money_limit, check_quantity_limit, money, quantity, rate


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def line_amount(qty, unit_price) -> Decimal:
    return money(quantity(qty) * money(unit_price))


def compute_totals(lines, tax_rate) -> DocumentTotals:
    """
    lines: iterable of objects/dicts exposing quantity + unit_price.
    """
    subtotal = ZERO
    for line in lines:
        if isinstance(line, dict):
            qty, price = line.get("quantity"), line.get("unit_price")
        else:
            qty, price = line.quantity, line.unit_price
        subtotal += line_amount(qty, price)

    subtotal = check_money_limit(money(subtotal), label="Document subtotal")
    tax_amount = check_money_limit(money(subtotal * rate(tax_rate)), label="Document tax")
    return DocumentTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=check_money_limit(money(subtotal + tax_amount), label="Document total"),
    )


def normalize_lines(lines, *, allow_service_lines: bool = True) -> list[dict]:
    """
    Validate raw line payloads (from API or internal callers).

    Each line: {product (optional), description, quantity, unit_price}
    """
    if not lines:
        raise InvalidInputError("Document must contain at least one line")

    out: list[dict] = []
    for idx, raw in enumerate(lines, start=1):
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Line {idx} must be an object")

        qty = quantity(raw.get("quantity"))
        price = money(raw.get("unit_price"))
        product = raw.get("product")
        description = (raw.get("description") or "").strip()

        if qty <= 0:
            raise InvalidInputError(f"Line {idx}: quantity must be > 0")
        if price < 0:
            raise InvalidInputError(f"Line {idx}: unit_price cannot be negative")
        if product is None and not allow_service_lines:
            raise InvalidInputError(f"Line {idx}: product is required")
        if product is None and not description:
            raise InvalidInputError(f"Line {idx}: description is required for lines without a product")
        check_quantity_limit(qty, label=f"Line {idx}: quantity")
        check_money_limit(price, label=f"Line {idx}: unit_price")
        amount = check_money_limit(line_amount(qty, price), label=f"Line {idx}: amount")

        out.append(
            {
                "product": product,
                "description": description or getattr(product, "name", ""),
                "quantity": qty,
                "unit_price": price,
                "amount": amount,
            }
        )
    return out


class CommercialDocument(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="+",
    )

    number = models.CharField(max_length=32)
    date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True, default="")

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_rate = models.DecimalField(max_digits=7, decimal_places=4, default=Decimal("0.0000"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "number"],
                name="uniq_%(app_label)s_%(class)s_tenant_number",
            ),
            models.CheckConstraint(
                condition=Q(total__gte=Decimal("0.00")),
                name="chk_%(app_label)s_%(class)s_total_nonnegative",
            ),
        ]

    def __str__(self):
        return self.number

    def apply_totals(self, totals: DocumentTotals) -> None:
        self.subtotal = totals.subtotal
        self.tax_amount = totals.tax_amount
        self.total = totals.total

    def clean(self):
        self.number = (self.number or "").strip()
        if not self.number:
            raise ValidationError({"number": "Document number is required"})
        if self.tax_rate is not None and self.tax_rate < 0:
            raise ValidationError({"tax_rate": "tax_rate cannot be negative"})

    def save(self, *args, **kwargs):
        # number uniqueness is enforced by the DB constraint so that a racing
        # insert surfaces as IntegrityError for the numbering retry loop
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)


class DocumentLine(models.Model):
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        abstract = True
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_%(app_label)s_%(class)s_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(unit_price__gte=Decimal("0.00")),
                name="chk_%(app_label)s_%(class)s_price_nonnegative",
            ),
        ]

    @property
    def is_stock_line(self) -> bool:
        return bool(self.product_id) and self.product.is_stockable

    def save(self, *args, **kwargs):
        self.amount = line_amount(self.quantity, self.unit_price)
        return super().save(*args, **kwargs)


def copy_line_payloads(lines) -> list[dict]:
    return [
        {
            "product": line.product,
            "description": line.description,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
        }
        for line in lines
    ]


SETTLEMENT_TOLERANCE = Decimal("0.01")


def settlement_status(*, total, settled, posted: str, partially_paid: str, paid: str) -> str:
    """
    Status of a posted bill/invoice given how much of it has been settled
    (payments, plus credit notes on the sales side).
    """
    total = money(total)
    settled = money(settled)
    if settled <= ZERO:
        return posted
    if settled >= total - SETTLEMENT_TOLERANCE:
        return paid
    return partially_paid


class PaymentMethod(models.TextChoices):
    CASH = "CASH", "Cash"
    BANK = "BANK", "Bank transfer"


class PaymentRecord(models.Model):
    """Settlement of a posted bill or invoice; one journal entry each."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="+",
    )

    date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=10, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    memo = models.CharField(max_length=255, blank=True, default="")

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["-date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="chk_%(app_label)s_%(class)s_amount_gt_zero",
            ),
        ]

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError({"amount": "amount must be > 0"})

    def save(self, *args, **kwargs):
        self.memo = (self.memo or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.method} {self.amount}"


# ------------------------------------------------------------
# Service helpers
# ------------------------------------------------------------


def lock_document(model, *, tenant_id, document_id, label: str):
    """Re-read the authoritative tenant-scoped row under a row lock."""
    from tenants.context import require_tenant_id

    require_tenant_id(tenant_id)
    try:
        return model.objects.select_for_update().get(id=document_id, tenant_id=tenant_id)
    except (model.DoesNotExist, ValueError, TypeError, ValidationError) as exc:
        raise NotFoundError(f"{label} not found") from exc


def get_document(model, *, tenant_id, document_id, label: str):
    from tenants.context import require_tenant_id

    require_tenant_id(tenant_id)
    try:
        return model.objects.prefetch_related("lines__product").get(id=document_id, tenant_id=tenant_id)
    except (model.DoesNotExist, ValueError, TypeError, ValidationError) as exc:
        raise NotFoundError(f"{label} not found") from exc


def create_document(
    *,
    tenant_id,
    document_type: str,
    model,
    line_model,
    line_field: str,
    lines: list[dict],
    tax_rate=0,
    **fields,
):
    """
    Numbered insert of a document and its lines with derived totals.
    `lines` must already be normalized (normalize_lines).
    """
    from sequences.services.sequence_service import create_numbered

    totals = compute_totals(lines, tax_rate)

    def _create(number: str):
        doc = model(tenant_id=tenant_id, number=number, tax_rate=rate(tax_rate), **fields)
        doc.apply_totals(totals)
        doc.save()
        line_model.objects.bulk_create(
            [
                line_model(
                    **{line_field: doc},
                    product=line["product"],
                    description=line["description"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    amount=line["amount"],
                )
                for line in lines
            ]
        )
        return doc

    return create_numbered(
        tenant_id=tenant_id,
        document_type=document_type,
        model=model,
        create=_create,
    )
