# accounting/tests/test_fiscal_years.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.services.fiscal_year_service import (
    create_fiscal_year,
    find_fiscal_year_for_date,
    lock_fiscal_year,
    unlock_fiscal_year,
)
from core.errors import ConflictError, InvalidRangeError, NotFoundError
from core.testing import make_tenant


class FiscalYearTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant()

    def _create(self, name="FY 2024", start=date(2024, 1, 1), end=date(2024, 12, 31), tenant=None):
        return create_fiscal_year(
            tenant_id=(tenant or self.tenant).id, name=name, start_date=start, end_date=end
        )

    def test_create(self):
        fy = self._create()
        self.assertFalse(fy.is_locked)
        self.assertTrue(fy.contains(date(2024, 6, 1)))
        self.assertFalse(fy.contains(date(2025, 1, 1)))

    def test_end_must_follow_start(self):
        with self.assertRaises(InvalidRangeError):
            self._create(start=date(2024, 12, 31), end=date(2024, 1, 1))
        with self.assertRaises(InvalidRangeError):
            self._create(start=date(2024, 1, 1), end=date(2024, 1, 1))

    def test_overlap_conflicts(self):
        self._create()
        with self.assertRaises(ConflictError):
            self._create(name="Mid 2024", start=date(2024, 7, 1), end=date(2025, 6, 30))

    def test_duplicate_name_conflicts(self):
        self._create()
        with self.assertRaises(ConflictError):
            self._create(start=date(2025, 1, 1), end=date(2025, 12, 31))

    def test_other_tenants_do_not_overlap(self):
        self._create()
        other = make_tenant("Other Co")
        fy = self._create(tenant=other)
        self.assertEqual(fy.tenant_id, other.id)

    def test_lock_and_unlock_are_idempotent(self):
        fy = self._create()

        locked = lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=fy.id)
        locked_at = locked.locked_at
        again = lock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=fy.id)
        self.assertTrue(again.is_locked)
        self.assertEqual(again.locked_at, locked_at)

        unlocked = unlock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=fy.id)
        self.assertFalse(unlocked.is_locked)
        self.assertIsNone(unlocked.locked_at)
        self.assertFalse(unlock_fiscal_year(tenant_id=self.tenant.id, fiscal_year_id=fy.id).is_locked)

    def test_lock_other_tenant_fiscal_year_is_not_found(self):
        fy = self._create()
        other = make_tenant("Other Co")
        with self.assertRaises(NotFoundError):
            lock_fiscal_year(tenant_id=other.id, fiscal_year_id=fy.id)

    def test_find_for_date(self):
        fy = self._create()
        self.assertEqual(find_fiscal_year_for_date(tenant_id=self.tenant.id, on_date=date(2024, 2, 29)), fy)
        with self.assertRaises(NotFoundError):
            find_fiscal_year_for_date(tenant_id=self.tenant.id, on_date=date(2023, 12, 31))
