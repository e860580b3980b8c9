# sales/models/invoice.py

"""
SALES INVOICE + CUSTOMER PAYMENTS

paid_amount     changed ONLY by payment_service
credited_amount changed ONLY by credit_note_service
(both under a row lock on the invoice)
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from core.documents import CommercialDocument, DocumentLine, PaymentRecord
from core.money import ZERO, money


class InvoiceStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    POSTED = "POSTED", "Posted"
    PARTIALLY_PAID = "PARTIALLY_PAID", "Partially paid"
    PAID = "PAID", "Paid"
    CANCELLED = "CANCELLED", "Cancelled"


class SalesInvoice(CommercialDocument):
    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.DRAFT,
    )

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    # one invoice per order
    sales_order = models.OneToOneField(
        "sales.SalesOrder",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoice",
    )

    due_date = models.DateField(null=True, blank=True)
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credited_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

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
    def settled_amount(self) -> Decimal:
        return money(self.paid_amount + self.credited_amount)

    @property
    def outstanding(self) -> Decimal:
        return max(money(self.total - self.settled_amount), ZERO)

    @property
    def uncredited_total(self) -> Decimal:
        return max(money(self.total - self.credited_amount), ZERO)

    def clean(self):
        super().clean()
        if self.paid_amount is not None and self.paid_amount < 0:
            raise ValidationError({"paid_amount": "paid_amount cannot be negative"})
        if self.credited_amount is not None and self.credited_amount < 0:
            raise ValidationError({"credited_amount": "credited_amount cannot be negative"})
        if self.status not in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED) and not self.posted_at:
            raise ValidationError({"posted_at": "posted_at is required once the invoice is posted"})


class SalesInvoiceLine(DocumentLine):
    invoice = models.ForeignKey(
        SalesInvoice,
        on_delete=models.CASCADE,
        related_name="lines",
    )


class CustomerPayment(PaymentRecord):
    invoice = models.ForeignKey(
        SalesInvoice,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    class Meta(PaymentRecord.Meta):
        pass

    def __str__(self):
        return f"{self.invoice.number}: {self.amount} ({self.method})"
