# sales/models/credit_note.py

"""
CREDIT NOTE

Negative-value document against a posted invoice. Amount fields are stored
positive; `signed_total` exposes the document's negative value.
"""

from decimal import Decimal

from django.db import models

from core.documents import CommercialDocument, DocumentLine
from core.money import money


class CreditNoteStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    POSTED = "POSTED", "Posted"
    CANCELLED = "CANCELLED", "Cancelled"


class CreditNote(CommercialDocument):
    status = models.CharField(
        max_length=20,
        choices=CreditNoteStatus.choices,
        default=CreditNoteStatus.DRAFT,
    )

    invoice = models.ForeignKey(
        "sales.SalesInvoice",
        on_delete=models.PROTECT,
        related_name="credit_notes",
    )
    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credit_notes",
    )

    posted_at = models.DateTimeField(null=True, blank=True)
    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta(CommercialDocument.Meta):
        indexes = [models.Index(fields=["tenant", "status"])]

    @property
    def signed_total(self) -> Decimal:
        return money(-self.total)


class CreditNoteLine(DocumentLine):
    credit_note = models.ForeignKey(
        CreditNote,
        on_delete=models.CASCADE,
        related_name="lines",
    )
