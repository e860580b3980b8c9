# sales/tests/test_crm.py

from decimal import Decimal

from django.test import TestCase

from core.errors import ConflictError, InvalidInputError, InvalidStateError, NotFoundError
from core.testing import make_tenant
from sales.models import LeadSource, LeadStatus
from sales.services.crm_service import (
    convert_lead_to_customer,
    create_customer,
    create_lead,
    get_customer,
    lead_pipeline,
    list_customers,
    update_lead_status,
)


class CustomerTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        self.tid = self.tenant.id

    def test_create_and_search(self):
        create_customer(tenant_id=self.tid, name="  Globex ", email="ap@globex.test", company="Globex Corp")
        create_customer(tenant_id=self.tid, name="Initech")

        found = list(list_customers(tenant_id=self.tid, search="globex"))
        self.assertEqual(len(found), 1)
        self.assertEqual(found[0].name, "Globex")

    def test_name_required(self):
        with self.assertRaises(InvalidInputError):
            create_customer(tenant_id=self.tid, name="   ")

    def test_customers_are_tenant_scoped(self):
        other = make_tenant("Other Co")
        customer = create_customer(tenant_id=other.id, name="Hidden")
        with self.assertRaises(NotFoundError):
            get_customer(tenant_id=self.tid, customer_id=customer.id)


class LeadTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        self.tid = self.tenant.id

    def _lead(self, **kwargs):
        kwargs.setdefault("name", "Jane Prospect")
        return create_lead(tenant_id=self.tid, **kwargs)

    def test_create_lead_defaults(self):
        lead = self._lead(source="referral", expected_revenue="1500")
        self.assertEqual(lead.status, LeadStatus.NEW)
        self.assertEqual(lead.source, LeadSource.REFERRAL)
        self.assertEqual(lead.expected_revenue, Decimal("1500.00"))

        with self.assertRaises(InvalidInputError):
            self._lead(source="BILLBOARD")
        with self.assertRaises(InvalidInputError):
            self._lead(expected_revenue="-1")

    def test_status_moves(self):
        lead = self._lead()
        lead = update_lead_status(tenant_id=self.tid, lead_id=lead.id, status="qualified")
        self.assertEqual(lead.status, LeadStatus.QUALIFIED)

        with self.assertRaises(InvalidInputError):
            update_lead_status(tenant_id=self.tid, lead_id=lead.id, status="MAYBE")
        with self.assertRaises(InvalidStateError):
            update_lead_status(tenant_id=self.tid, lead_id=lead.id, status=LeadStatus.WON)

        update_lead_status(tenant_id=self.tid, lead_id=lead.id, status=LeadStatus.LOST)
        with self.assertRaises(InvalidStateError):
            update_lead_status(tenant_id=self.tid, lead_id=lead.id, status=LeadStatus.CONTACTED)

    def test_convert_lead(self):
        lead = self._lead(email="jane@prospect.test", company="Prospect Ltd")
        customer = convert_lead_to_customer(tenant_id=self.tid, lead_id=lead.id, phone="555-0100")

        lead.refresh_from_db()
        self.assertEqual(lead.status, LeadStatus.WON)
        self.assertEqual(lead.customer_id, customer.id)
        self.assertIsNotNone(lead.converted_at)
        self.assertEqual(customer.name, "Jane Prospect")
        self.assertEqual(customer.email, "jane@prospect.test")
        self.assertEqual(customer.phone, "555-0100")

        with self.assertRaises(ConflictError):
            convert_lead_to_customer(tenant_id=self.tid, lead_id=lead.id)

    def test_lost_lead_cannot_convert(self):
        lead = self._lead()
        update_lead_status(tenant_id=self.tid, lead_id=lead.id, status=LeadStatus.LOST)
        with self.assertRaises(InvalidStateError):
            convert_lead_to_customer(tenant_id=self.tid, lead_id=lead.id)

    def test_pipeline(self):
        self._lead(expected_revenue="100")
        self._lead(name="Second", expected_revenue="250")
        won = self._lead(name="Third")
        convert_lead_to_customer(tenant_id=self.tid, lead_id=won.id)

        summary = lead_pipeline(tenant_id=self.tid)
        by_status = {row["status"]: row for row in summary["pipeline"]}

        self.assertEqual([row["status"] for row in summary["pipeline"]], list(LeadStatus.values))
        self.assertEqual(by_status[LeadStatus.NEW]["count"], 2)
        self.assertEqual(by_status[LeadStatus.NEW]["expected_revenue"], Decimal("350.00"))
        self.assertEqual(by_status[LeadStatus.WON]["count"], 1)
        self.assertEqual(by_status[LeadStatus.LOST]["count"], 0)
        self.assertEqual(summary["total"], 3)
        self.assertEqual(summary["open"], 2)
