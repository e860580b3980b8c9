# sequences/models.py

"""
======================================================
PATH: sequences/models.py
======================================================
DOCUMENT SEQUENCE COUNTER

One persisted counter row per (tenant, document type).

Guarantees:
- next_value is read under a row lock and incremented in the same
  transaction as the document insert (no count()+1 races)
- counters never move backwards
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q


class DocumentType(models.TextChoices):
    REQUISITION = "PR", "Purchase Requisition"
    PURCHASE_ORDER = "PO", "Purchase Order"
    GOODS_RECEIPT = "GR", "Goods Receipt"
    VENDOR_BILL = "BILL", "Vendor Bill"
    STOCK_MOVE = "SM", "Stock Move"
    QUOTATION = "QTN", "Quotation"
    SALES_ORDER = "SO", "Sales Order"
    SALES_INVOICE = "INV", "Sales Invoice"
    CREDIT_NOTE = "CN", "Credit Note"


class DocumentSequence(models.Model):
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="document_sequences",
    )
    document_type = models.CharField(max_length=8, choices=DocumentType.choices)
    next_value = models.PositiveBigIntegerField(default=1)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["tenant", "document_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "document_type"],
                name="uniq_sequence_tenant_document_type",
            ),
            models.CheckConstraint(
                condition=Q(next_value__gte=1),
                name="chk_sequence_next_value_positive",
            ),
        ]

    def __str__(self):
        return f"{self.document_type} -> {self.next_value}"
