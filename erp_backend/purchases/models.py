# purchases/models.py

"""
PROCURE-TO-PAY DOCUMENTS

Requisition -> PurchaseOrder -> GoodsReceipt -> VendorBill -> VendorPayment

Status changes happen ONLY through purchases/services (lifecycle tables in
purchases/services/purchase_lifecycle.py). Models guard field-level rules;
cross-document rules live in services.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.documents import CommercialDocument, DocumentLine, PaymentRecord
from core.money import ZERO, money, quantity


class Vendor(models.Model):
    """
    Vendor master.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="vendors",
    )

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["tenant", "name"]),
            models.Index(fields=["tenant", "is_active"]),
        ]

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Vendor name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name


# ============================================================
# REQUISITION
# ============================================================


class RequisitionStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    SUBMITTED = "SUBMITTED", "Submitted"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    CANCELLED = "CANCELLED", "Cancelled"


class Requisition(CommercialDocument):
    """
    Internal request to buy. Prices are estimates; the PO created from an
    approved requisition copies them and may be edited before confirmation.
    """

    status = models.CharField(
        max_length=20,
        choices=RequisitionStatus.choices,
        default=RequisitionStatus.DRAFT,
    )

    requested_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    submitted_at = models.DateTimeField(null=True, blank=True)
    decided_at = models.DateTimeField(null=True, blank=True)

    class Meta(CommercialDocument.Meta):
        indexes = [models.Index(fields=["tenant", "status"])]

    @property
    def is_converted(self) -> bool:
        return PurchaseOrder.objects.filter(requisition_id=self.pk).exists()


class RequisitionLine(DocumentLine):
    requisition = models.ForeignKey(
        Requisition,
        on_delete=models.CASCADE,
        related_name="lines",
    )


# ============================================================
# PURCHASE ORDER
# ============================================================


class PurchaseOrderStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    CONFIRMED = "CONFIRMED", "Confirmed"
    RECEIVED = "RECEIVED", "Received"
    BILLED = "BILLED", "Billed"
    CANCELLED = "CANCELLED", "Cancelled"


class PurchaseOrder(CommercialDocument):
    status = models.CharField(
        max_length=20,
        choices=PurchaseOrderStatus.choices,
        default=PurchaseOrderStatus.DRAFT,
    )

    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
        null=True,
        blank=True,
    )

    # one PO per requisition: converting twice is impossible at DB level too
    requisition = models.OneToOneField(
        Requisition,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_order",
    )

    expected_date = models.DateField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)

    class Meta(CommercialDocument.Meta):
        indexes = [models.Index(fields=["tenant", "status"])]

    @property
    def is_fully_received(self) -> bool:
        return all(line.open_quantity <= 0 for line in self.lines.all())


class PurchaseOrderLine(DocumentLine):
    order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    received_quantity = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("0.000"))

    class Meta(DocumentLine.Meta):
        constraints = DocumentLine.Meta.constraints + [
            models.CheckConstraint(
                condition=Q(received_quantity__gte=Decimal("0.000")),
                name="chk_purchases_po_line_received_nonnegative",
            ),
        ]

    @property
    def open_quantity(self) -> Decimal:
        return quantity(self.quantity - self.received_quantity)


# ============================================================
# GOODS RECEIPT
# ============================================================


class GoodsReceipt(models.Model):
    """
    Physical receipt against a confirmed PO.
    In RECEIPT recognition mode it carries the RECEIPT stock move.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="goods_receipts",
    )

    number = models.CharField(max_length=32)
    date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True, default="")

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.PROTECT,
        related_name="receipts",
    )

    stock_move = models.ForeignKey(
        "inventory.StockMove",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "number"],
                name="uniq_goods_receipt_tenant_number",
            ),
        ]

    def __str__(self):
        return self.number


class GoodsReceiptLine(models.Model):
    receipt = models.ForeignKey(
        GoodsReceipt,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    order_line = models.ForeignKey(
        PurchaseOrderLine,
        on_delete=models.PROTECT,
        related_name="receipt_lines",
    )
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    quantity = models.DecimalField(max_digits=14, decimal_places=3)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_goods_receipt_line_quantity_gt_zero",
            ),
        ]


# ============================================================
# VENDOR BILL
# ============================================================


class BillStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    POSTED = "POSTED", "Posted"
    PARTIALLY_PAID = "PARTIALLY_PAID", "Partially paid"
    PAID = "PAID", "Paid"
    CANCELLED = "CANCELLED", "Cancelled"


class VendorBill(CommercialDocument):
    """
    Accounts payable document.

    paid_amount is changed ONLY by payment_service under a row lock on the bill.
    """

    status = models.CharField(
        max_length=20,
        choices=BillStatus.choices,
        default=BillStatus.DRAFT,
    )

    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="bills",
        null=True,
        blank=True,
    )

    # one bill per PO
    purchase_order = models.OneToOneField(
        PurchaseOrder,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bill",
    )

    due_date = models.DateField(null=True, blank=True)
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    posted_at = models.DateTimeField(null=True, blank=True)
    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    stock_move = models.ForeignKey(
        "inventory.StockMove",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta(CommercialDocument.Meta):
        indexes = [
            models.Index(fields=["tenant", "status"]),
            models.Index(fields=["tenant", "due_date"]),
        ]

    @property
    def outstanding(self) -> Decimal:
        return max(money(self.total - self.paid_amount), ZERO)

    def clean(self):
        super().clean()
        if self.paid_amount is not None and self.paid_amount < 0:
            raise ValidationError({"paid_amount": "paid_amount cannot be negative"})
        if self.status != BillStatus.DRAFT and self.status != BillStatus.CANCELLED and not self.posted_at:
            raise ValidationError({"posted_at": "posted_at is required once the bill is posted"})


class VendorBillLine(DocumentLine):
    bill = models.ForeignKey(
        VendorBill,
        on_delete=models.CASCADE,
        related_name="lines",
    )


class VendorPayment(PaymentRecord):
    bill = models.ForeignKey(
        VendorBill,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    class Meta(PaymentRecord.Meta):
        pass

    def __str__(self):
        return f"{self.bill.number}: {self.amount} ({self.method})"
