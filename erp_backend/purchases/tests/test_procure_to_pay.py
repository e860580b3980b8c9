# purchases/tests/test_procure_to_pay.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.fiscal_year_service import lock_fiscal_year
from core.errors import ConflictError, ForbiddenError, InvalidInputError, InvalidStateError, NotFoundError
from core.testing import account_balance, fiscal_year, make_tenant, seed_ledger
from inventory.models import PurchaseStockRecognition, StockMove
from inventory.services.catalog_service import create_product
from inventory.services.settings_service import update_inventory_settings
from inventory.services.stock_move_service import get_stock_balance
from inventory.services.warehouse_service import create_warehouse
from purchases.models import BillStatus, PurchaseOrderStatus, RequisitionStatus
from purchases.services.billing_service import (
    cancel_vendor_bill,
    create_bill_from_po,
    create_vendor_bill,
    post_vendor_bill,
)
from purchases.services.payment_service import record_vendor_payment
from purchases.services.purchase_order_service import (
    cancel_purchase_order,
    confirm_purchase_order,
    create_purchase_order,
)
from purchases.services.receiving_service import create_goods_receipt
from purchases.services.requisition_service import (
    approve_requisition,
    cancel_requisition,
    convert_requisition_to_po,
    create_requisition,
    reject_requisition,
    submit_requisition,
)
from purchases.services.vendor_service import create_vendor
from tenants.models import Module
from tenants.services.module_access import set_module_enabled

D = date(2024, 4, 10)


class ProcureToPayBase(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2024)
        self.tid = self.tenant.id
        self.wh = create_warehouse(tenant_id=self.tid, code="WH1", name="Main Warehouse")
        self.widget = create_product(
            tenant_id=self.tid, sku="W-1", name="Widget", standard_cost="5.00", sale_price="9.00"
        )
        self.vendor = create_vendor(tenant_id=self.tid, name="Parts Ltd")

    def _po(self, qty="10", price="6.00", **kwargs):
        order = create_purchase_order(
            tenant_id=self.tid,
            vendor_id=self.vendor.id,
            date=D,
            lines=[{"product_id": self.widget.id, "quantity": qty, "unit_price": price}],
            **kwargs,
        )
        return confirm_purchase_order(tenant_id=self.tid, purchase_order_id=order.id)

    def _on_hand(self):
        return get_stock_balance(tenant_id=self.tid, product_id=self.widget.id)


class RequisitionTests(ProcureToPayBase):
    def _requisition(self):
        return create_requisition(
            tenant_id=self.tid,
            date=D,
            tax_rate="0.10",
            lines=[
                {"product_id": self.widget.id, "quantity": "10", "unit_price": "6.00"},
                {"description": "Freight", "quantity": "1", "unit_price": "4.00"},
            ],
        )

    def test_totals_and_number(self):
        req = self._requisition()
        self.assertEqual(req.status, RequisitionStatus.DRAFT)
        self.assertTrue(req.number.startswith("PR-"))
        self.assertEqual(req.subtotal, Decimal("64.00"))
        self.assertEqual(req.tax_amount, Decimal("6.40"))
        self.assertEqual(req.total, Decimal("70.40"))
        self.assertEqual(req.lines.count(), 2)

    def test_approval_flow_and_single_conversion(self):
        req = self._requisition()

        with self.assertRaises(InvalidStateError):
            approve_requisition(tenant_id=self.tid, requisition_id=req.id)

        submit_requisition(tenant_id=self.tid, requisition_id=req.id)
        req = approve_requisition(tenant_id=self.tid, requisition_id=req.id)
        self.assertEqual(req.status, RequisitionStatus.APPROVED)
        self.assertIsNotNone(req.decided_at)

        order = convert_requisition_to_po(tenant_id=self.tid, requisition_id=req.id, vendor_id=self.vendor.id)
        self.assertEqual(order.status, PurchaseOrderStatus.DRAFT)
        self.assertEqual(order.requisition_id, req.id)
        self.assertEqual(order.vendor_id, self.vendor.id)
        self.assertEqual(order.total, req.total)
        self.assertEqual(order.tax_rate, req.tax_rate)
        self.assertEqual(order.lines.count(), 2)

        with self.assertRaises(ConflictError):
            convert_requisition_to_po(tenant_id=self.tid, requisition_id=req.id)
        with self.assertRaises(InvalidStateError):
            cancel_requisition(tenant_id=self.tid, requisition_id=req.id)

    def test_rejected_requisition_cannot_convert(self):
        req = self._requisition()
        submit_requisition(tenant_id=self.tid, requisition_id=req.id)
        reject_requisition(tenant_id=self.tid, requisition_id=req.id)

        with self.assertRaises(InvalidStateError):
            convert_requisition_to_po(tenant_id=self.tid, requisition_id=req.id)
        with self.assertRaises(InvalidStateError):
            cancel_requisition(tenant_id=self.tid, requisition_id=req.id)

    def test_invalid_lines(self):
        with self.assertRaises(InvalidInputError):
            create_requisition(tenant_id=self.tid, lines=[])
        with self.assertRaises(InvalidInputError):
            create_requisition(
                tenant_id=self.tid, lines=[{"product_id": self.widget.id, "quantity": "0", "unit_price": "1"}]
            )
        with self.assertRaises(NotFoundError):
            create_requisition(
                tenant_id=self.tid,
                lines=[{"product_id": "00000000-0000-0000-0000-000000000000", "quantity": "1", "unit_price": "1"}],
            )

    def test_products_of_other_tenants_are_not_visible(self):
        other = make_tenant("Other Co")
        foreign = create_product(tenant_id=other.id, sku="X-1", name="Foreign")
        with self.assertRaises(NotFoundError):
            create_requisition(
                tenant_id=self.tid, lines=[{"product_id": foreign.id, "quantity": "1", "unit_price": "1"}]
            )


class PurchaseOrderTests(ProcureToPayBase):
    def test_numbers_are_distinct_and_sequential(self):
        numbers = [self._po().number for _ in range(3)]
        self.assertEqual(len(set(numbers)), 3)
        self.assertEqual(numbers, sorted(numbers))
        self.assertTrue(all(n.startswith("PO-") for n in numbers))

    def test_receipt_requires_confirmed_order(self):
        order = create_purchase_order(
            tenant_id=self.tid, lines=[{"product_id": self.widget.id, "quantity": "1", "unit_price": "1"}]
        )
        with self.assertRaises(InvalidStateError):
            create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id)

    def test_partial_receipt_keeps_order_confirmed(self):
        order = self._po()
        line = order.lines.get()

        create_goods_receipt(
            tenant_id=self.tid, purchase_order_id=order.id, date=D, lines=[{"order_line_id": line.id, "quantity": "4"}]
        )
        order.refresh_from_db()
        line.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrderStatus.CONFIRMED)
        self.assertEqual(line.received_quantity, Decimal("4.000"))
        self.assertEqual(self._on_hand(), Decimal("4.000"))

        with self.assertRaises(InvalidInputError):
            create_goods_receipt(
                tenant_id=self.tid,
                purchase_order_id=order.id,
                lines=[{"order_line_id": line.id, "quantity": "4"}, {"order_line_id": line.id, "quantity": "3"}],
            )

        receipt = create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrderStatus.RECEIVED)
        self.assertEqual(receipt.lines.get().quantity, Decimal("6.000"))
        self.assertEqual(self._on_hand(), Decimal("10.000"))

    def test_unknown_order_line_is_not_found(self):
        order = self._po()
        with self.assertRaises(NotFoundError):
            create_goods_receipt(
                tenant_id=self.tid, purchase_order_id=order.id, lines=[{"order_line_id": 999999, "quantity": "1"}]
            )

    def test_cancel_rules(self):
        order = self._po()
        create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        order.refresh_from_db()
        with self.assertRaises(InvalidStateError):
            cancel_purchase_order(tenant_id=self.tid, purchase_order_id=order.id)

        fresh = self._po()
        fresh = cancel_purchase_order(tenant_id=self.tid, purchase_order_id=fresh.id)
        self.assertEqual(fresh.status, PurchaseOrderStatus.CANCELLED)
        with self.assertRaises(InvalidStateError):
            confirm_purchase_order(tenant_id=self.tid, purchase_order_id=fresh.id)

    def test_inactive_vendor_is_rejected(self):
        self.vendor.is_active = False
        self.vendor.save()
        with self.assertRaises(InvalidInputError):
            self._po()


class ReceiptModeBillingTests(ProcureToPayBase):
    """
    RECEIPT recognition:
    - goods receipt: Dr Inventory / Cr Accrued Expenses at standard cost
    - bill clears Accrued Expenses; price difference goes to Purchase Expense
    """

    def _received_order(self):
        order = self._po()
        create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        return order

    def test_full_cycle(self):
        order = self._received_order()
        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("50.00"))
        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("50.00"))

        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrderStatus.BILLED)
        self.assertEqual(bill.total, Decimal("60.00"))
        self.assertEqual(bill.due_date, date(2024, 5, 10))

        with self.assertRaises(ConflictError):
            create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id)

        bill = post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)
        self.assertEqual(bill.status, BillStatus.POSTED)
        self.assertIsNotNone(bill.posted_at)
        self.assertIsNone(bill.stock_move)
        self.assertEqual(bill.journal_entry.reference, f"BILL:{bill.number}")

        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("0.00"))
        self.assertEqual(account_balance(self.tenant, "2000"), Decimal("60.00"))
        self.assertEqual(account_balance(self.tenant, "5100"), Decimal("10.00"))
        self.assertEqual(self._on_hand(), Decimal("10.000"))

        with self.assertRaises(ConflictError):
            post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)

    def test_bill_requires_fully_received_order(self):
        order = self._po()
        with self.assertRaises(InvalidStateError):
            create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id)

    def test_payments(self):
        order = self._received_order()
        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)

        with self.assertRaises(InvalidStateError):
            record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="10")

        post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)

        with self.assertRaises(InvalidInputError):
            record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="0")
        with self.assertRaises(InvalidInputError):
            record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="60.02")

        payment = record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="25", date=D)
        bill.refresh_from_db()
        self.assertEqual(bill.status, BillStatus.PARTIALLY_PAID)
        self.assertEqual(bill.outstanding, Decimal("35.00"))
        self.assertEqual(payment.journal_entry.reference, f"PAY:{payment.id}")
        self.assertEqual(account_balance(self.tenant, "1000"), Decimal("-25.00"))

        record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="35", method="BANK", date=D)
        bill.refresh_from_db()
        self.assertEqual(bill.status, BillStatus.PAID)
        self.assertEqual(bill.paid_amount, Decimal("60.00"))
        self.assertEqual(account_balance(self.tenant, "2000"), Decimal("0.00"))
        self.assertEqual(account_balance(self.tenant, "1100"), Decimal("-35.00"))

        with self.assertRaises(InvalidStateError):
            record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="1")

    def test_cancel_bill(self):
        order = self._received_order()
        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)
        with self.assertRaises(InvalidStateError):
            cancel_vendor_bill(tenant_id=self.tid, bill_id=bill.id)

        draft = create_vendor_bill(
            tenant_id=self.tid, date=D, lines=[{"description": "Consulting", "quantity": "1", "unit_price": "100"}]
        )
        draft = cancel_vendor_bill(tenant_id=self.tid, bill_id=draft.id)
        self.assertEqual(draft.status, BillStatus.CANCELLED)
        with self.assertRaises(InvalidStateError):
            post_vendor_bill(tenant_id=self.tid, bill_id=draft.id)

    def test_locked_fiscal_year_rolls_back_posting(self):
        order = self._received_order()
        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        lock_fiscal_year(tenant_id=self.tid, fiscal_year_id=fiscal_year(self.tenant, 2024).id)

        with self.assertRaises(ForbiddenError):
            post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)

        bill.refresh_from_db()
        self.assertEqual(bill.status, BillStatus.DRAFT)
        self.assertIsNone(bill.journal_entry_id)

    def test_direct_bill_brings_stock_with_it(self):
        bill = create_vendor_bill(
            tenant_id=self.tid,
            vendor_id=self.vendor.id,
            date=D,
            tax_rate="0.10",
            lines=[
                {"product_id": self.widget.id, "quantity": "2", "unit_price": "5.00"},
                {"description": "Delivery", "quantity": "1", "unit_price": "10.00"},
            ],
        )
        self.assertEqual(bill.total, Decimal("22.00"))

        bill = post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)
        self.assertIsNotNone(bill.stock_move)
        self.assertTrue(bill.stock_move.is_posted)
        self.assertIsNone(bill.stock_move.journal_entry_id)
        self.assertEqual(self._on_hand(), Decimal("2.000"))

        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("10.00"))
        self.assertEqual(account_balance(self.tenant, "2000"), Decimal("22.00"))
        self.assertEqual(account_balance(self.tenant, "5100"), Decimal("12.00"))
        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("0.00"))


class UnvaluedReceiptTests(ProcureToPayBase):
    def test_bill_debits_inventory_when_receipt_was_not_valued(self):
        update_inventory_settings(tenant_id=self.tid, post_stock_valuation=False)
        order = self._po()
        receipt = create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        self.assertIsNone(receipt.stock_move.journal_entry_id)
        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("0.00"))

        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)

        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("0.00"))
        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("50.00"))
        self.assertEqual(account_balance(self.tenant, "2000"), Decimal("60.00"))
        self.assertEqual(account_balance(self.tenant, "5100"), Decimal("10.00"))

    def test_accrual_is_cleared_after_valuation_is_switched_off(self):
        order = self._po()
        create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        update_inventory_settings(tenant_id=self.tid, post_stock_valuation=False)

        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)

        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("0.00"))
        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("50.00"))
        self.assertEqual(account_balance(self.tenant, "5100"), Decimal("10.00"))


class BillModeTests(ProcureToPayBase):
    def setUp(self):
        super().setUp()
        update_inventory_settings(tenant_id=self.tid, purchase_stock_recognition=PurchaseStockRecognition.BILL)

    def test_confirmed_order_can_be_billed_and_stock_arrives_with_bill(self):
        order = self._po()
        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        self.assertEqual(self._on_hand(), Decimal("0.000"))

        bill = post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)
        self.assertEqual(self._on_hand(), Decimal("10.000"))
        self.assertEqual(bill.stock_move.source_reference, bill.number)

        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("50.00"))
        self.assertEqual(account_balance(self.tenant, "2000"), Decimal("60.00"))
        self.assertEqual(account_balance(self.tenant, "5100"), Decimal("10.00"))
        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("0.00"))

    def test_goods_receipt_moves_no_stock(self):
        order = self._po()
        receipt = create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        self.assertIsNone(receipt.stock_move)
        self.assertEqual(self._on_hand(), Decimal("0.000"))
        self.assertFalse(StockMove.objects.filter(tenant=self.tenant).exists())

        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrderStatus.RECEIVED)
        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)
        self.assertEqual(self._on_hand(), Decimal("10.000"))


class LedgerDisabledTests(ProcureToPayBase):
    def test_documents_post_without_journals(self):
        set_module_enabled(tenant_id=self.tid, module=Module.ACCOUNTING, enabled=False)

        order = self._po()
        receipt = create_goods_receipt(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        self.assertIsNone(receipt.stock_move.journal_entry_id)

        bill = create_bill_from_po(tenant_id=self.tid, purchase_order_id=order.id, date=D)
        bill = post_vendor_bill(tenant_id=self.tid, bill_id=bill.id)
        self.assertEqual(bill.status, BillStatus.POSTED)
        self.assertIsNone(bill.journal_entry_id)

        payment = record_vendor_payment(tenant_id=self.tid, bill_id=bill.id, amount="60", date=D)
        self.assertIsNone(payment.journal_entry_id)
        self.assertFalse(JournalEntry.objects.filter(tenant=self.tenant).exists())
