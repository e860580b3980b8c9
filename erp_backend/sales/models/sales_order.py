# sales/models/sales_order.py

from django.db import models

from core.documents import CommercialDocument, DocumentLine


class SalesOrderStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    CONFIRMED = "CONFIRMED", "Confirmed"
    FULFILLED = "FULFILLED", "Fulfilled"
    CANCELLED = "CANCELLED", "Cancelled"


class SalesOrder(CommercialDocument):
    status = models.CharField(
        max_length=20,
        choices=SalesOrderStatus.choices,
        default=SalesOrderStatus.DRAFT,
    )

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_orders",
    )

    # one order per quotation
    quotation = models.OneToOneField(
        "sales.Quotation",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_order",
    )

    confirmed_at = models.DateTimeField(null=True, blank=True)

    class Meta(CommercialDocument.Meta):
        indexes = [models.Index(fields=["tenant", "status"])]


class SalesOrderLine(DocumentLine):
    order = models.ForeignKey(
        SalesOrder,
        on_delete=models.CASCADE,
        related_name="lines",
    )
