# sales/tests/test_order_to_cash.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.journal import JournalEntry
from core.errors import ConflictError, InsufficientStockError, InvalidInputError, InvalidStateError
from core.testing import account_balance, make_tenant, seed_ledger
from inventory.services.catalog_service import create_product
from inventory.services.stock_move_service import get_stock_balance, receive_into_stock
from inventory.services.warehouse_service import create_warehouse
from sales.models import CreditNoteStatus, InvoiceStatus, QuotationStatus, SalesOrderStatus
from sales.services.credit_note_service import cancel_credit_note, create_credit_note, post_credit_note
from sales.services.crm_service import create_customer
from sales.services.invoice_service import (
    cancel_sales_invoice,
    create_invoice_from_order,
    create_sales_invoice,
    post_sales_invoice,
)
from sales.services.order_service import cancel_sales_order, confirm_sales_order, create_sales_order
from sales.services.payment_service import record_customer_payment
from sales.services.quotation_service import (
    accept_quotation,
    cancel_quotation,
    convert_quotation_to_order,
    create_quotation,
    expire_quotations,
    send_quotation,
)
from tenants.models import Module
from tenants.services.module_access import set_module_enabled

D = date(2024, 5, 1)


class OrderToCashBase(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2024)
        self.tid = self.tenant.id
        create_warehouse(tenant_id=self.tid, code="WH1", name="Main Warehouse")
        self.widget = create_product(
            tenant_id=self.tid, sku="W-1", name="Widget", standard_cost="5.00", sale_price="9.00"
        )
        receive_into_stock(
            tenant_id=self.tid,
            lines=[{"product": self.widget, "quantity": "20"}],
            date=D,
            memo="Opening stock",
        )
        self.customer = create_customer(tenant_id=self.tid, name="Globex")

    def _lines(self, qty="3", price="9.00"):
        return [{"product_id": self.widget.id, "quantity": qty, "unit_price": price}]

    def _invoice(self, qty="3", tax_rate="0.15", post=True):
        invoice = create_sales_invoice(
            tenant_id=self.tid, customer_id=self.customer.id, date=D, tax_rate=tax_rate, lines=self._lines(qty)
        )
        if post:
            invoice = post_sales_invoice(tenant_id=self.tid, invoice_id=invoice.id)
        return invoice

    def _on_hand(self):
        return get_stock_balance(tenant_id=self.tid, product_id=self.widget.id)


class QuotationTests(OrderToCashBase):
    def _quotation(self, **kwargs):
        kwargs.setdefault("date", date(2024, 3, 1))
        return create_quotation(tenant_id=self.tid, customer_id=self.customer.id, lines=self._lines(), **kwargs)

    def test_quotation_to_order(self):
        quotation = self._quotation(tax_rate="0.15", valid_until=date(2024, 3, 31))
        self.assertTrue(quotation.number.startswith("QTN-"))
        self.assertEqual(quotation.total, Decimal("31.05"))

        with self.assertRaises(InvalidStateError):
            convert_quotation_to_order(tenant_id=self.tid, quotation_id=quotation.id)

        send_quotation(tenant_id=self.tid, quotation_id=quotation.id)
        accept_quotation(tenant_id=self.tid, quotation_id=quotation.id)

        order = convert_quotation_to_order(tenant_id=self.tid, quotation_id=quotation.id)
        self.assertEqual(order.status, SalesOrderStatus.DRAFT)
        self.assertEqual(order.quotation_id, quotation.id)
        self.assertEqual(order.customer_id, self.customer.id)
        self.assertEqual(order.total, Decimal("31.05"))

        with self.assertRaises(ConflictError):
            convert_quotation_to_order(tenant_id=self.tid, quotation_id=quotation.id)

    def test_cancel_rules(self):
        draft = cancel_quotation(tenant_id=self.tid, quotation_id=self._quotation().id)
        self.assertEqual(draft.status, QuotationStatus.CANCELLED)

        sent = self._quotation()
        send_quotation(tenant_id=self.tid, quotation_id=sent.id)
        self.assertEqual(cancel_quotation(tenant_id=self.tid, quotation_id=sent.id).status, QuotationStatus.CANCELLED)

        accepted = self._quotation()
        send_quotation(tenant_id=self.tid, quotation_id=accepted.id)
        accept_quotation(tenant_id=self.tid, quotation_id=accepted.id)
        with self.assertRaises(InvalidStateError):
            cancel_quotation(tenant_id=self.tid, quotation_id=accepted.id)

        with self.assertRaises(InvalidStateError):
            accept_quotation(tenant_id=self.tid, quotation_id=self._quotation().id)

    def test_expire_only_lapsed_sent_quotations(self):
        lapsed = self._quotation(valid_until=date(2024, 3, 31))
        current = self._quotation(valid_until=date(2024, 6, 30))
        draft = self._quotation(valid_until=date(2024, 3, 2))
        for q in (lapsed, current):
            send_quotation(tenant_id=self.tid, quotation_id=q.id)

        expired = expire_quotations(tenant_id=self.tid, as_of=date(2024, 4, 1))
        self.assertEqual(expired, [lapsed.number])

        lapsed.refresh_from_db()
        current.refresh_from_db()
        draft.refresh_from_db()
        self.assertEqual(lapsed.status, QuotationStatus.EXPIRED)
        self.assertEqual(current.status, QuotationStatus.SENT)
        self.assertEqual(draft.status, QuotationStatus.DRAFT)

        with self.assertRaises(InvalidStateError):
            accept_quotation(tenant_id=self.tid, quotation_id=lapsed.id)
        self.assertEqual(expire_quotations(tenant_id=self.tid, as_of=date(2024, 4, 1)), [])

    def test_validity_cannot_precede_date(self):
        with self.assertRaises(InvalidInputError):
            self._quotation(valid_until=date(2024, 2, 1))


class SalesOrderTests(OrderToCashBase):
    def _order(self, confirm=True):
        order = create_sales_order(tenant_id=self.tid, customer_id=self.customer.id, date=D, lines=self._lines())
        if confirm:
            order = confirm_sales_order(tenant_id=self.tid, sales_order_id=order.id)
        return order

    def test_invoice_from_order(self):
        order = self._order()
        invoice = create_invoice_from_order(tenant_id=self.tid, sales_order_id=order.id, date=D)
        order.refresh_from_db()
        self.assertEqual(order.status, SalesOrderStatus.FULFILLED)
        self.assertEqual(invoice.sales_order_id, order.id)
        self.assertEqual(invoice.total, order.total)
        self.assertEqual(invoice.due_date, date(2024, 5, 31))

        with self.assertRaises(ConflictError):
            create_invoice_from_order(tenant_id=self.tid, sales_order_id=order.id)
        with self.assertRaises(InvalidStateError):
            cancel_sales_order(tenant_id=self.tid, sales_order_id=order.id)

    def test_draft_order_cannot_be_invoiced(self):
        order = self._order(confirm=False)
        with self.assertRaises(InvalidStateError):
            create_invoice_from_order(tenant_id=self.tid, sales_order_id=order.id)

    def test_cancel_from_draft_and_confirmed(self):
        for confirm in (False, True):
            order = cancel_sales_order(tenant_id=self.tid, sales_order_id=self._order(confirm=confirm).id)
            self.assertEqual(order.status, SalesOrderStatus.CANCELLED)


class InvoicePostingTests(OrderToCashBase):
    """
    GUARANTEES:
    - Posting issues stock and books revenue, tax and COGS in one entry
    - Insufficient stock aborts the whole posting
    - Settlement counts payments plus posted credit notes
    """

    def test_post_invoice(self):
        invoice = self._invoice()
        self.assertEqual(invoice.status, InvoiceStatus.POSTED)
        self.assertEqual(invoice.journal_entry.reference, f"INV:{invoice.number}")
        self.assertEqual(invoice.stock_move.source_reference, invoice.number)
        self.assertEqual(self._on_hand(), Decimal("17.000"))

        self.assertEqual(account_balance(self.tenant, "1200"), Decimal("31.05"))
        self.assertEqual(account_balance(self.tenant, "4000"), Decimal("27.00"))
        self.assertEqual(account_balance(self.tenant, "2200"), Decimal("4.05"))
        self.assertEqual(account_balance(self.tenant, "5000"), Decimal("15.00"))
        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("85.00"))

        with self.assertRaises(ConflictError):
            post_sales_invoice(tenant_id=self.tid, invoice_id=invoice.id)

    def test_insufficient_stock_aborts_posting(self):
        invoice = self._invoice(qty="25", post=False)
        with self.assertRaises(InsufficientStockError):
            post_sales_invoice(tenant_id=self.tid, invoice_id=invoice.id)

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, InvoiceStatus.DRAFT)
        self.assertIsNone(invoice.stock_move_id)
        self.assertEqual(self._on_hand(), Decimal("20.000"))
        self.assertFalse(JournalEntry.objects.filter(tenant=self.tenant, reference__startswith="INV:").exists())

    def test_service_invoice_moves_no_stock(self):
        invoice = create_sales_invoice(
            tenant_id=self.tid, date=D, lines=[{"description": "Installation", "quantity": "2", "unit_price": "50"}]
        )
        invoice = post_sales_invoice(tenant_id=self.tid, invoice_id=invoice.id)
        self.assertIsNone(invoice.stock_move)
        self.assertEqual(account_balance(self.tenant, "4000"), Decimal("100.00"))
        self.assertEqual(account_balance(self.tenant, "5000"), Decimal("0.00"))

    def test_cancel_rules(self):
        draft = self._invoice(post=False)
        with self.assertRaises(InvalidStateError):
            record_customer_payment(tenant_id=self.tid, invoice_id=draft.id, amount="1")
        self.assertEqual(cancel_sales_invoice(tenant_id=self.tid, invoice_id=draft.id).status, InvoiceStatus.CANCELLED)

        posted = self._invoice()
        with self.assertRaises(InvalidStateError):
            cancel_sales_invoice(tenant_id=self.tid, invoice_id=posted.id)

    def test_payments_and_credit_note(self):
        invoice = self._invoice()

        payment = record_customer_payment(tenant_id=self.tid, invoice_id=invoice.id, amount="10", date=D)
        self.assertEqual(payment.journal_entry.reference, f"RCPT:{payment.id}")
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, InvoiceStatus.PARTIALLY_PAID)

        credit_note = create_credit_note(
            tenant_id=self.tid, invoice_id=invoice.id, date=D, lines=self._lines(qty="1")
        )
        self.assertTrue(credit_note.number.startswith("CN-"))
        self.assertEqual(credit_note.total, Decimal("10.35"))
        self.assertEqual(credit_note.signed_total, Decimal("-10.35"))

        credit_note = post_credit_note(tenant_id=self.tid, credit_note_id=credit_note.id)
        self.assertEqual(credit_note.status, CreditNoteStatus.POSTED)
        self.assertEqual(credit_note.journal_entry.reference, f"CN:{credit_note.number}")

        invoice.refresh_from_db()
        self.assertEqual(invoice.credited_amount, Decimal("10.35"))
        self.assertEqual(invoice.outstanding, Decimal("10.70"))
        self.assertEqual(invoice.status, InvoiceStatus.PARTIALLY_PAID)
        self.assertEqual(account_balance(self.tenant, "4000"), Decimal("18.00"))
        self.assertEqual(account_balance(self.tenant, "2200"), Decimal("2.70"))
        self.assertEqual(account_balance(self.tenant, "1200"), Decimal("10.70"))

        with self.assertRaises(InvalidInputError):
            record_customer_payment(tenant_id=self.tid, invoice_id=invoice.id, amount="10.72")

        record_customer_payment(tenant_id=self.tid, invoice_id=invoice.id, amount="10.70", method="BANK", date=D)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, InvoiceStatus.PAID)
        self.assertEqual(account_balance(self.tenant, "1200"), Decimal("0.00"))
        self.assertEqual(account_balance(self.tenant, "1100"), Decimal("10.70"))

        with self.assertRaises(ConflictError):
            post_credit_note(tenant_id=self.tid, credit_note_id=credit_note.id)
        with self.assertRaises(InvalidStateError):
            cancel_credit_note(tenant_id=self.tid, credit_note_id=credit_note.id)

    def test_full_credit_settles_invoice(self):
        invoice = self._invoice()
        credit_note = create_credit_note(tenant_id=self.tid, invoice_id=invoice.id, date=D)
        self.assertEqual(credit_note.total, invoice.total)
        self.assertEqual(credit_note.lines.count(), 1)

        post_credit_note(tenant_id=self.tid, credit_note_id=credit_note.id)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, InvoiceStatus.PAID)
        self.assertEqual(invoice.outstanding, Decimal("0.00"))

        with self.assertRaises(InvalidInputError):
            create_credit_note(tenant_id=self.tid, invoice_id=invoice.id, lines=self._lines(qty="1"))

    def test_credit_cap_is_rechecked_at_posting(self):
        invoice = self._invoice()
        first = create_credit_note(tenant_id=self.tid, invoice_id=invoice.id, date=D, lines=self._lines(qty="2"))
        second = create_credit_note(tenant_id=self.tid, invoice_id=invoice.id, date=D, lines=self._lines(qty="2"))

        post_credit_note(tenant_id=self.tid, credit_note_id=first.id)
        with self.assertRaises(InvalidInputError):
            post_credit_note(tenant_id=self.tid, credit_note_id=second.id)

        second = cancel_credit_note(tenant_id=self.tid, credit_note_id=second.id)
        self.assertEqual(second.status, CreditNoteStatus.CANCELLED)

    def test_credit_note_requires_posted_invoice(self):
        draft = self._invoice(post=False)
        with self.assertRaises(InvalidStateError):
            create_credit_note(tenant_id=self.tid, invoice_id=draft.id)

    def test_ledger_disabled_still_moves_stock(self):
        set_module_enabled(tenant_id=self.tid, module=Module.ACCOUNTING, enabled=False)
        invoice = self._invoice()
        self.assertIsNone(invoice.journal_entry_id)
        self.assertEqual(self._on_hand(), Decimal("17.000"))
