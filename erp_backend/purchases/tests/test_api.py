# purchases/tests/test_api.py

from __future__ import annotations

from django.test import TestCase

from core.testing import api_client_for, make_tenant, make_user, seed_ledger
from inventory.services.catalog_service import create_product
from inventory.services.warehouse_service import create_warehouse
from tenants.models import Module
from tenants.services.module_access import set_module_enabled


class PurchasesApiTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2024)
        create_warehouse(tenant_id=self.tenant.id, code="WH", name="Main")
        self.widget = create_product(
            tenant_id=self.tenant.id, sku="W-1", name="Widget", standard_cost="5.00", sale_price="9.00"
        )
        self.client = api_client_for(make_user(self.tenant))

    def _post(self, url, data=None, expected=200):
        res = self.client.post(f"/api/purchases/{url}", data or {}, format="json")
        self.assertEqual(res.status_code, expected, res.data)
        return res.data

    def test_requisition_to_payment_over_http(self):
        vendor = self._post("vendors/", {"name": "Parts Ltd", "email": "ap@parts.test"}, expected=201)

        req = self._post(
            "requisitions/create/",
            {
                "date": "2024-04-01",
                "lines": [{"product_id": str(self.widget.id), "quantity": "10", "unit_price": "6.00"}],
            },
            expected=201,
        )
        self.assertEqual(req["status"], "DRAFT")
        self.assertEqual(req["total"], "60.00")

        self._post(f"requisitions/{req['id']}/submit/")
        self._post(f"requisitions/{req['id']}/approve/")
        po = self._post(f"requisitions/{req['id']}/convert/", {"vendor_id": vendor["id"]}, expected=201)
        self.assertEqual(po["vendor_name"], "Parts Ltd")

        res = self.client.post(f"/api/purchases/requisitions/{req['id']}/convert/", {}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "conflict")

        po = self._post(f"purchase-orders/{po['id']}/confirm/")
        self.assertEqual(po["status"], "CONFIRMED")

        line_id = po["lines"][0]["id"]
        receipt = self._post(
            f"purchase-orders/{po['id']}/receipts/",
            {"date": "2024-04-05", "lines": [{"order_line_id": line_id, "quantity": "10"}]},
            expected=201,
        )
        self.assertTrue(receipt["number"].startswith("GR-"))
        self.assertIsNotNone(receipt["stock_move"])

        res = self.client.get(f"/api/purchases/purchase-orders/{po['id']}/receipts/")
        self.assertEqual(len(res.data), 1)

        bill = self._post(f"purchase-orders/{po['id']}/bill/", {"date": "2024-04-06"}, expected=201)
        self.assertEqual(bill["status"], "DRAFT")
        bill = self._post(f"bills/{bill['id']}/post/")
        self.assertEqual(bill["status"], "POSTED")
        self.assertIsNotNone(bill["journal_entry"])

        res = self.client.post(
            f"/api/purchases/bills/{bill['id']}/payments/", {"amount": "100.00", "date": "2024-04-07"}, format="json"
        )
        self.assertEqual(res.status_code, 400)

        self._post(
            f"bills/{bill['id']}/payments/",
            {"amount": "60.00", "method": "BANK", "date": "2024-04-07"},
            expected=201,
        )
        res = self.client.get(f"/api/purchases/bills/{bill['id']}/")
        self.assertEqual(res.data["status"], "PAID")
        self.assertEqual(res.data["outstanding"], "0.00")
        self.assertEqual(len(res.data["payments"]), 1)

        res = self.client.get("/api/purchases/purchase-orders/", {"status": "BILLED"})
        self.assertEqual(res.data["count"], 1)

    def test_validation_errors(self):
        res = self.client.post("/api/purchases/purchase-orders/create/", {"lines": []}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.post(
            "/api/purchases/bills/create/",
            {"lines": [{"quantity": "1", "unit_price": "5"}]},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

        res = self.client.post("/api/purchases/bills/00000000-0000-0000-0000-000000000000/post/")
        self.assertEqual(res.status_code, 404)

        # each line fits the amount column but their sum does not
        big = {"description": "Plant", "quantity": "1", "unit_price": "600000000000.00"}
        res = self.client.post("/api/purchases/bills/create/", {"lines": [big, big]}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_tenant_isolation(self):
        bill = self._post(
            "bills/create/",
            {"lines": [{"description": "Consulting", "quantity": "1", "unit_price": "100"}]},
            expected=201,
        )
        other = make_tenant("Other Co")
        outsider = api_client_for(make_user(other))
        res = outsider.get(f"/api/purchases/bills/{bill['id']}/")
        self.assertEqual(res.status_code, 404)
        res = outsider.post(f"/api/purchases/bills/{bill['id']}/post/")
        self.assertEqual(res.status_code, 404)

    def test_module_must_be_enabled(self):
        set_module_enabled(tenant_id=self.tenant.id, module=Module.PURCHASE, enabled=False)
        res = self.client.get("/api/purchases/vendors/")
        self.assertEqual(res.status_code, 403)
