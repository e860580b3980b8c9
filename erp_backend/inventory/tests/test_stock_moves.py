# inventory/tests/test_stock_moves.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.fiscal_year_service import lock_fiscal_year
from core.errors import (
    ConflictError,
    ForbiddenError,
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
)
from core.testing import account_balance, fiscal_year, make_tenant, seed_ledger
from inventory.models import MoveType, StockBalance, StockMove
from inventory.services.catalog_service import create_product
from inventory.services.settings_service import update_inventory_settings
from inventory.services.stock_move_service import (
    compute_line_deltas,
    create_stock_move,
    get_stock_balance,
    issue_from_stock,
    post_stock_move,
    receive_into_stock,
)
from inventory.services.warehouse_service import create_location, create_warehouse
from tenants.models import Module
from tenants.services.module_access import set_module_enabled

D = date(2024, 3, 15)


class StockMoveTests(TestCase):
    """
    GUARANTEES:
    - On-hand never goes negative unless the tenant allows it for the move type
    - A rejected post changes nothing
    - A move posts at most once
    - Transfers conserve quantity
    """

    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2024)
        self.wh = create_warehouse(tenant_id=self.tenant.id, code="wh1", name="Main Warehouse")
        self.main = self.wh.locations.get(code="MAIN")
        self.quar = self.wh.locations.get(code="QUAR")
        self.widget = create_product(
            tenant_id=self.tenant.id, sku="W-1", name="Widget", standard_cost="5.00", sale_price="9.00"
        )

    def _move(self, move_type, qty, **loc):
        if not loc:
            loc = {"location": self.main}
        return create_stock_move(
            tenant_id=self.tenant.id,
            move_type=move_type,
            date=D,
            lines=[{"product": self.widget, "quantity": qty, **loc}],
        )

    def _post(self, move, **kwargs):
        return post_stock_move(tenant_id=self.tenant.id, stock_move_id=move.id, **kwargs)

    def _on_hand(self, location=None):
        return get_stock_balance(
            tenant_id=self.tenant.id,
            product_id=self.widget.id,
            location_id=location.id if location else None,
        )

    def test_warehouse_gets_main_and_quarantine_locations(self):
        self.assertEqual(self.wh.code, "WH1")
        self.assertFalse(self.main.is_quarantine)
        self.assertTrue(self.quar.is_quarantine)

    def test_move_is_created_as_numbered_draft(self):
        move = self._move(MoveType.RECEIPT, 10)
        self.assertEqual(move.number, "SM-00001")
        self.assertFalse(move.is_posted)
        self.assertEqual(self._on_hand(), Decimal("0.000"))

        second = self._move(MoveType.RECEIPT, 1)
        self.assertEqual(second.number, "SM-00002")

    def test_issue_with_no_stock_is_rejected_and_changes_nothing(self):
        move = self._move(MoveType.ISSUE, 1)
        with self.assertRaises(InsufficientStockError):
            self._post(move)

        move.refresh_from_db()
        self.assertFalse(move.is_posted)
        self.assertFalse(StockBalance.objects.filter(product=self.widget, quantity_on_hand__lt=0).exists())

    def test_receipt_then_issue(self):
        self._post(self._move(MoveType.RECEIPT, 10))
        self._post(self._move(MoveType.ISSUE, 5))
        self.assertEqual(self._on_hand(self.main), Decimal("5.000"))

        with self.assertRaises(InsufficientStockError):
            self._post(self._move(MoveType.ISSUE, 6))
        self.assertEqual(self._on_hand(self.main), Decimal("5.000"))

    def test_move_posts_only_once(self):
        move = self._move(MoveType.RECEIPT, 10)
        self._post(move)
        with self.assertRaises(ConflictError):
            self._post(move)
        self.assertEqual(self._on_hand(), Decimal("10.000"))

    def test_posted_move_is_immutable(self):
        move = self._post(self._move(MoveType.RECEIPT, 3))
        move.memo = "changed"
        with self.assertRaises(ValidationError):
            move.save()
        with self.assertRaises(ValidationError):
            move.delete()

    def test_transfer_conserves_quantity(self):
        back = create_location(tenant_id=self.tenant.id, warehouse_id=self.wh.id, code="back", name="Back room")
        self._post(self._move(MoveType.RECEIPT, 10))
        self._post(self._move(MoveType.TRANSFER, 4, from_location=self.main, to_location=back))

        self.assertEqual(self._on_hand(self.main), Decimal("6.000"))
        self.assertEqual(self._on_hand(back), Decimal("4.000"))
        self.assertEqual(self._on_hand(), Decimal("10.000"))

    def test_transfer_requires_distinct_locations(self):
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.TRANSFER, 1, from_location=self.main, to_location=self.main)
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.TRANSFER, 1, from_location=self.main)

    def test_quarantine_needs_exactly_one_quarantine_side(self):
        back = create_location(tenant_id=self.tenant.id, warehouse_id=self.wh.id, code="back", name="Back room")
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.QUARANTINE, 1, from_location=self.main, to_location=back)

        self._post(self._move(MoveType.RECEIPT, 5))
        self._post(self._move(MoveType.QUARANTINE, 2, from_location=self.main, to_location=self.quar))
        self.assertEqual(self._on_hand(self.quar), Decimal("2.000"))
        self.assertEqual(self._on_hand(self.main), Decimal("3.000"))

    def test_quantity_rules(self):
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.RECEIPT, 0)
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.ISSUE, -1)
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.ADJUSTMENT, 0)
        with self.assertRaises(InvalidInputError):
            create_stock_move(tenant_id=self.tenant.id, move_type="TELEPORT", lines=[])
        with self.assertRaises(InvalidInputError):
            create_stock_move(tenant_id=self.tenant.id, move_type=MoveType.RECEIPT, lines=[])

    def test_quantity_limits(self):
        with self.assertRaises(InvalidInputError):
            self._move(MoveType.RECEIPT, "100000000000")

        self._post(self._move(MoveType.RECEIPT, "60000000000"))
        move = self._move(MoveType.RECEIPT, "60000000000")
        with self.assertRaises(InvalidInputError):
            self._post(move)

        move.refresh_from_db()
        self.assertFalse(move.is_posted)
        self.assertEqual(self._on_hand(), Decimal("60000000000.000"))

    def test_negative_adjustment_and_allowed_negative_stock(self):
        self._post(self._move(MoveType.RECEIPT, 2))
        with self.assertRaises(InsufficientStockError):
            self._post(self._move(MoveType.ADJUSTMENT, -3))

        update_inventory_settings(tenant_id=self.tenant.id, negative_stock_move_types=["adjustment"])
        self._post(self._move(MoveType.ADJUSTMENT, -3))
        self.assertEqual(self._on_hand(), Decimal("-1.000"))

        # the allowance is per move type
        with self.assertRaises(InsufficientStockError):
            self._post(self._move(MoveType.ISSUE, 1))

    def test_service_products_do_not_carry_stock(self):
        consulting = create_product(
            tenant_id=self.tenant.id, sku="SVC-1", name="Consulting", product_type="SERVICE"
        )
        with self.assertRaises(InvalidInputError):
            create_stock_move(
                tenant_id=self.tenant.id,
                move_type=MoveType.RECEIPT,
                lines=[{"product": consulting, "location": self.main, "quantity": 1}],
            )

    def test_foreign_product_and_location_are_not_found(self):
        other = make_tenant("Other Co")
        other_wh = create_warehouse(tenant_id=other.id, code="X", name="X")
        other_product = create_product(tenant_id=other.id, sku="W-1", name="Widget")

        with self.assertRaises(NotFoundError):
            create_stock_move(
                tenant_id=self.tenant.id,
                move_type=MoveType.RECEIPT,
                lines=[{"product_id": other_product.id, "location": self.main, "quantity": 1}],
            )
        with self.assertRaises(NotFoundError):
            create_stock_move(
                tenant_id=self.tenant.id,
                move_type=MoveType.RECEIPT,
                lines=[
                    {
                        "product": self.widget,
                        "location_id": other_wh.locations.get(code="MAIN").id,
                        "quantity": 1,
                    }
                ],
            )

    def test_receipt_posts_valuation_at_standard_cost(self):
        move = self._post(self._move(MoveType.RECEIPT, 10))
        self.assertIsNotNone(move.journal_entry)
        self.assertEqual(move.journal_entry.reference, f"SM:{move.number}")
        self.assertEqual(move.lines.get().unit_cost, Decimal("5.00"))

        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("50.00"))
        self.assertEqual(account_balance(self.tenant, "2100"), Decimal("50.00"))

        self._post(self._move(MoveType.ISSUE, 4))
        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("30.00"))
        self.assertEqual(account_balance(self.tenant, "5000"), Decimal("20.00"))

    def test_adjustment_gain_goes_to_other_income(self):
        self._post(self._move(MoveType.ADJUSTMENT, 2))
        self.assertEqual(account_balance(self.tenant, "1300"), Decimal("10.00"))
        self.assertEqual(account_balance(self.tenant, "4200"), Decimal("10.00"))

    def test_transfer_and_unvalued_moves_post_no_journal(self):
        back = create_location(tenant_id=self.tenant.id, warehouse_id=self.wh.id, code="back", name="Back room")
        self._post(self._move(MoveType.RECEIPT, 3))
        before = JournalEntry.objects.filter(tenant=self.tenant).count()

        move = self._post(self._move(MoveType.TRANSFER, 1, from_location=self.main, to_location=back))
        self.assertIsNone(move.journal_entry)

        move = self._post(self._move(MoveType.RECEIPT, 1), emit_journal=False)
        self.assertIsNone(move.journal_entry)

        update_inventory_settings(tenant_id=self.tenant.id, post_stock_valuation=False)
        move = self._post(self._move(MoveType.RECEIPT, 1))
        self.assertIsNone(move.journal_entry)

        update_inventory_settings(tenant_id=self.tenant.id, post_stock_valuation=True)
        set_module_enabled(tenant_id=self.tenant.id, module=Module.ACCOUNTING, enabled=False)
        move = self._post(self._move(MoveType.RECEIPT, 1))
        self.assertIsNone(move.journal_entry)

        self.assertEqual(JournalEntry.objects.filter(tenant=self.tenant).count(), before)

    def test_locked_year_rolls_back_the_whole_post(self):
        lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=fiscal_year(self.tenant, 2024).id)
        move = self._move(MoveType.RECEIPT, 10)
        with self.assertRaises(ForbiddenError):
            self._post(move)

        move.refresh_from_db()
        self.assertFalse(move.is_posted)
        self.assertEqual(self._on_hand(), Decimal("0.000"))

    def test_document_helpers_use_default_location(self):
        receipt = receive_into_stock(
            tenant_id=self.tenant.id,
            lines=[{"product": self.widget, "quantity": Decimal("7")}],
            date=D,
            source_reference="GR-00001",
        )
        self.assertTrue(receipt.is_posted)
        self.assertEqual(receipt.lines.get().location, self.main)

        issue = issue_from_stock(
            tenant_id=self.tenant.id,
            lines=[{"product": self.widget, "quantity": Decimal("2")}],
            date=D,
            source_reference="INV-00001",
        )
        self.assertIsNone(issue.journal_entry)
        self.assertEqual(self._on_hand(self.main), Decimal("5.000"))

    def test_compute_line_deltas(self):
        class L:
            def __init__(self, **kw):
                self.__dict__.update(kw)

        deltas = compute_line_deltas(
            MoveType.TRANSFER,
            [L(product_id=1, from_location_id="a", to_location_id="b", location_id=None, quantity=Decimal("2"))],
        )
        self.assertEqual(deltas[(1, "a")], Decimal("-2.000"))
        self.assertEqual(deltas[(1, "b")], Decimal("2.000"))

        deltas = compute_line_deltas(
            MoveType.ISSUE,
            [
                L(product_id=1, location_id="a", quantity=Decimal("1")),
                L(product_id=1, location_id="a", quantity=Decimal("2")),
            ],
        )
        self.assertEqual(deltas[(1, "a")], Decimal("-3.000"))

    def test_balances_are_tenant_scoped(self):
        self._post(self._move(MoveType.RECEIPT, 10))
        other = make_tenant("Other Co")
        self.assertEqual(
            get_stock_balance(tenant_id=other.id, product_id=self.widget.id),
            Decimal("0.000"),
        )
        self.assertEqual(StockMove.objects.filter(tenant=other).count(), 0)
