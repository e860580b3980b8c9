# sales/tests/test_api.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from core.testing import api_client_for, make_tenant, make_user, seed_ledger
from inventory.services.catalog_service import create_product
from inventory.services.stock_move_service import receive_into_stock
from inventory.services.warehouse_service import create_warehouse
from tenants.models import Module
from tenants.services.module_access import set_module_enabled


class SalesApiTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        seed_ledger(self.tenant, year=2024)
        create_warehouse(tenant_id=self.tenant.id, code="WH", name="Main")
        self.widget = create_product(
            tenant_id=self.tenant.id, sku="W-1", name="Widget", standard_cost="5.00", sale_price="9.00"
        )
        receive_into_stock(
            tenant_id=self.tenant.id,
            lines=[{"product": self.widget, "quantity": "20"}],
            date=date(2024, 4, 1),
        )
        self.client = api_client_for(make_user(self.tenant))

    def _post(self, url, data=None, expected=200):
        res = self.client.post(f"/api/sales/{url}", data or {}, format="json")
        self.assertEqual(res.status_code, expected, res.data)
        return res.data

    def _lines(self, qty="3"):
        return [{"product_id": str(self.widget.id), "quantity": qty, "unit_price": "9.00"}]

    def test_lead_to_payment_over_http(self):
        lead = self._post("leads/", {"name": "Globex", "source": "WEBSITE", "expected_revenue": "500"}, expected=201)
        self.assertEqual(lead["status"], "NEW")
        self._post(f"leads/{lead['id']}/status/", {"status": "QUALIFIED"})
        customer = self._post(f"leads/{lead['id']}/convert/", {"email": "ap@globex.test"}, expected=201)

        res = self.client.post(f"/api/sales/leads/{lead['id']}/convert/", {}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "conflict")

        pipeline = self.client.get("/api/sales/leads/pipeline/").data
        self.assertEqual(pipeline["total"], 1)
        self.assertEqual(pipeline["open"], 0)

        quote = self._post(
            "quotations/create/",
            {"customer_id": customer["id"], "date": "2024-05-01", "tax_rate": "0.15", "lines": self._lines()},
            expected=201,
        )
        self.assertEqual(quote["total"], "31.05")
        self.assertEqual(quote["customer_name"], "Globex")

        self._post(f"quotations/{quote['id']}/send/")
        self._post(f"quotations/{quote['id']}/accept/")
        order = self._post(f"quotations/{quote['id']}/convert/", expected=201)
        order = self._post(f"orders/{order['id']}/confirm/")
        self.assertEqual(order["status"], "CONFIRMED")

        invoice = self._post(f"orders/{order['id']}/invoice/", {"date": "2024-05-02"}, expected=201)
        self.assertEqual(invoice["due_date"], "2024-06-01")
        res = self.client.post(f"/api/sales/orders/{order['id']}/invoice/", {}, format="json")
        self.assertEqual(res.status_code, 409)

        invoice = self._post(f"invoices/{invoice['id']}/post/")
        self.assertEqual(invoice["status"], "POSTED")
        self.assertIsNotNone(invoice["journal_entry"])
        self.assertIsNotNone(invoice["stock_move"])

        credit = self._post(
            "credit-notes/create/",
            {"invoice_id": invoice["id"], "date": "2024-05-03", "lines": self._lines(qty="1")},
            expected=201,
        )
        self.assertEqual(credit["signed_total"], "-10.35")
        self._post(f"credit-notes/{credit['id']}/post/")

        res = self.client.post(
            f"/api/sales/invoices/{invoice['id']}/payments/", {"amount": "25", "date": "2024-05-04"}, format="json"
        )
        self.assertEqual(res.status_code, 400)

        self._post(
            f"invoices/{invoice['id']}/payments/",
            {"amount": "20.70", "method": "BANK", "date": "2024-05-04"},
            expected=201,
        )
        res = self.client.get(f"/api/sales/invoices/{invoice['id']}/")
        self.assertEqual(res.data["status"], "PAID")
        self.assertEqual(res.data["credited_amount"], "10.35")
        self.assertEqual(res.data["outstanding"], "0.00")
        self.assertEqual(len(res.data["payments"]), 1)

        res = self.client.get("/api/sales/invoices/", {"status": "PAID"})
        self.assertEqual(res.data["count"], 1)

    def test_expire_quotations(self):
        quote = self._post(
            "quotations/create/",
            {"date": "2024-03-01", "valid_until": "2024-03-31", "lines": self._lines()},
            expected=201,
        )
        self._post(f"quotations/{quote['id']}/send/")

        data = self._post("quotations/expire/", {"as_of": "2024-04-01"})
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["expired"], [quote["number"]])

        res = self.client.post(f"/api/sales/quotations/{quote['id']}/accept/")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "invalid_state")

    def test_insufficient_stock(self):
        invoice = self._post("invoices/create/", {"lines": self._lines(qty="50")}, expected=201)
        res = self.client.post(f"/api/sales/invoices/{invoice['id']}/post/")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "insufficient_stock")

    def test_validation_errors(self):
        res = self.client.post("/api/sales/orders/create/", {"lines": []}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.post("/api/sales/leads/", {"name": "X", "source": "BILLBOARD"}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.post("/api/sales/invoices/00000000-0000-0000-0000-000000000000/post/")
        self.assertEqual(res.status_code, 404)

    def test_tenant_isolation(self):
        customer = self._post("customers/", {"name": "Initech"}, expected=201)
        other = make_tenant("Other Co")
        outsider = api_client_for(make_user(other))

        res = outsider.get("/api/sales/customers/")
        self.assertEqual(res.data, [])
        res = outsider.post(
            "/api/sales/quotations/create/",
            {"customer_id": customer["id"], "lines": self._lines()},
            format="json",
        )
        self.assertEqual(res.status_code, 404)

    def test_module_must_be_enabled(self):
        set_module_enabled(tenant_id=self.tenant.id, module=Module.SALES, enabled=False)
        res = self.client.get("/api/sales/customers/")
        self.assertEqual(res.status_code, 403)
