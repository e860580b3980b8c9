# accounting/tests/test_api.py

from __future__ import annotations

from django.test import TestCase

from accounting.models.journal import JournalEntry
from core.testing import account, api_client_for, fiscal_year, make_tenant, make_user, seed_ledger
from tenants.models import Module
from tenants.services.module_access import set_module_enabled


class AccountingApiTests(TestCase):
    """
    HTTP surface: tenant comes from the caller, errors map to statuses.
    """

    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2024)
        self.user = make_user(self.tenant)
        self.client = api_client_for(self.user)
        self.fy = fiscal_year(self.tenant, 2024)

    def _entry_payload(self, on="2024-06-01", reference=None, credit="100.00"):
        payload = {
            "fiscal_year_id": self.fy.id,
            "date": on,
            "lines": [
                {"account_id": account(self.tenant, "1000").id, "debit": "100.00"},
                {"account_id": account(self.tenant, "4000").id, "credit": credit},
            ],
        }
        if reference:
            payload["reference"] = reference
        return payload

    def test_post_entry_then_lock(self):
        res = self.client.post("/api/accounting/journal-entries/post/", self._entry_payload(), format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(len(res.data["lines"]), 2)

        res = self.client.post(f"/api/accounting/fiscal-years/{self.fy.id}/lock/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["is_locked"])

        res = self.client.post(
            "/api/accounting/journal-entries/post/", self._entry_payload(on="2024-07-01"), format="json"
        )
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["code"], "forbidden")

    def test_error_statuses(self):
        res = self.client.post(
            "/api/accounting/journal-entries/post/", self._entry_payload(credit="90.00"), format="json"
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["code"], "unbalanced")

        res = self.client.post(
            "/api/accounting/journal-entries/post/", self._entry_payload(on="2026-01-01"), format="json"
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["code"], "invalid_range")

        self.client.post("/api/accounting/journal-entries/post/", self._entry_payload(reference="R-1"), format="json")
        res = self.client.post(
            "/api/accounting/journal-entries/post/", self._entry_payload(reference="R-1"), format="json"
        )
        self.assertEqual(res.status_code, 409)

    def test_journal_entries_are_tenant_scoped(self):
        self.client.post("/api/accounting/journal-entries/post/", self._entry_payload(), format="json")

        other = make_tenant("Other Co")
        seed_ledger(other)
        other_client = api_client_for(make_user(other))

        res = other_client.get("/api/accounting/journal-entries/")
        self.assertEqual(res.status_code, 200)
        results = res.data["results"] if isinstance(res.data, dict) else res.data
        self.assertEqual(len(results), 0)

        entry = JournalEntry.objects.get(tenant=self.tenant)
        self.assertEqual(other_client.get(f"/api/accounting/journal-entries/{entry.id}/").status_code, 404)

    def test_create_and_update_account(self):
        res = self.client.post(
            "/api/accounting/accounts/",
            {"code": "1010", "name": "Petty Cash", "account_type": "ASSET"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        res = self.client.patch(
            f"/api/accounting/accounts/{res.data['id']}/", {"is_active": False}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["is_active"])

        res = self.client.post(
            "/api/accounting/accounts/",
            {"code": "1010", "name": "Duplicate", "account_type": "ASSET"},
            format="json",
        )
        self.assertEqual(res.status_code, 409)

    def test_reports(self):
        self.client.post("/api/accounting/journal-entries/post/", self._entry_payload(), format="json")

        res = self.client.get("/api/accounting/profit-and-loss/", {"fiscal_year_id": self.fy.id})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(str(res.data["net_income"]), "100.00")

        self.assertEqual(self.client.get("/api/accounting/profit-and-loss/").status_code, 400)
        self.assertEqual(self.client.get("/api/accounting/trial-balance/").status_code, 200)
        self.assertEqual(self.client.get("/api/accounting/balance-sheet/").status_code, 200)

        res = self.client.get("/api/accounting/ledger/", {"account_id": account(self.tenant, "1000").id})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(str(res.data["accounts"][0]["balance"]), "100.00")

    def test_user_without_tenant_is_forbidden(self):
        client = api_client_for(make_user(None))
        res = client.get("/api/accounting/accounts/")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["detail"], "Company context required")

    def test_disabled_module_is_forbidden(self):
        set_module_enabled(tenant_id=self.tenant.id, module=Module.ACCOUNTING, enabled=False)
        res = self.client.get("/api/accounting/accounts/")
        self.assertEqual(res.status_code, 403)
        self.assertIn("ACCOUNTING", res.data["detail"].upper())

    def test_anonymous_is_rejected(self):
        from rest_framework.test import APIClient

        res = APIClient().get("/api/accounting/accounts/")
        self.assertIn(res.status_code, (401, 403))
