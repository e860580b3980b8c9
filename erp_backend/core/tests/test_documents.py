# core/tests/test_documents.py

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from core.documents import compute_totals, normalize_lines
from core.errors import InvalidInputError
from core.money import MAX_MONEY


class DocumentTotalsTests(SimpleTestCase):
    def _line(self, qty="1", price="10.00"):
        return {"description": "Item", "quantity": qty, "unit_price": price}

    def test_totals_round_per_line_then_tax(self):
        totals = compute_totals([self._line("3", "3.335"), self._line("1", "0.10")], "0.15")
        self.assertEqual(totals.subtotal, Decimal("10.12"))
        self.assertEqual(totals.tax_amount, Decimal("1.52"))
        self.assertEqual(totals.total, Decimal("11.64"))

    def test_line_amount_over_column_limit_is_invalid_input(self):
        with self.assertRaises(InvalidInputError):
            normalize_lines([self._line("10", "999999999999.00")])

    def test_quantity_over_column_limit_is_invalid_input(self):
        with self.assertRaises(InvalidInputError):
            normalize_lines([self._line("100000000000", "0.00")])

    def test_document_total_over_column_limit_is_invalid_input(self):
        lines = normalize_lines([self._line("1", "600000000000.00"), self._line("1", "600000000000.00")])
        with self.assertRaises(InvalidInputError):
            compute_totals(lines, "0")

    def test_tax_can_push_total_over_limit(self):
        with self.assertRaises(InvalidInputError):
            compute_totals([self._line("1", str(MAX_MONEY))], "0.10")

    def test_total_at_limit_is_accepted(self):
        totals = compute_totals(normalize_lines([self._line("1", str(MAX_MONEY))]), "0")
        self.assertEqual(totals.total, MAX_MONEY)
