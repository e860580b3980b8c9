# tenants/tests/test_module_access.py

from django.test import TestCase

from core.errors import ForbiddenError, InvalidInputError
from core.testing import api_client_for, make_tenant, make_user
from tenants.models import Module
from tenants.services.module_access import (
    enable_all_modules,
    enabled_modules,
    is_module_enabled,
    require_module,
    set_module_enabled,
)


class ModuleAccessTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant(modules=False)
        self.tid = self.tenant.id

    def test_disabled_by_default(self):
        self.assertFalse(is_module_enabled(tenant_id=self.tid, module=Module.SALES))
        self.assertEqual(enabled_modules(tenant_id=self.tid), [])
        with self.assertRaises(ForbiddenError):
            require_module(tenant_id=self.tid, module=Module.SALES)

    def test_toggle(self):
        set_module_enabled(tenant_id=self.tid, module="sales", enabled=True)
        self.assertTrue(is_module_enabled(tenant_id=self.tid, module=Module.SALES))
        require_module(tenant_id=self.tid, module=Module.SALES)

        set_module_enabled(tenant_id=self.tid, module=Module.SALES, enabled=False)
        self.assertFalse(is_module_enabled(tenant_id=self.tid, module=Module.SALES))

    def test_enable_all(self):
        self.assertEqual(sorted(enable_all_modules(tenant_id=self.tid)), sorted(Module.values))

    def test_unknown_module(self):
        with self.assertRaises(InvalidInputError):
            set_module_enabled(tenant_id=self.tid, module="PAYROLL", enabled=True)

    def test_tenant_required(self):
        with self.assertRaises(ForbiddenError):
            require_module(tenant_id=None, module=Module.SALES)


class ModuleApiTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant(modules=False)
        set_module_enabled(tenant_id=self.tenant.id, module=Module.INVENTORY, enabled=True)
        self.client = api_client_for(make_user(self.tenant))

    def test_active_modules(self):
        res = self.client.get("/api/modules/active/")
        self.assertEqual(res.status_code, 200)
        status = {row["module"]: row["enabled"] for row in res.data}
        self.assertTrue(status[Module.INVENTORY])
        self.assertFalse(status[Module.ACCOUNTING])

        res = self.client.get("/api/modules/check/inventory/")
        self.assertEqual(res.data, {"module": "INVENTORY", "enabled": True})

    def test_module_gate_on_erp_endpoint(self):
        res = self.client.get("/api/accounting/accounts/")
        self.assertEqual(res.status_code, 403)

    def test_company_context_required(self):
        client = api_client_for(make_user(None))
        res = client.get("/api/modules/active/")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["detail"], "Company context required")

    def test_inactive_tenant(self):
        self.tenant.is_active = False
        self.tenant.save()
        res = self.client.get("/api/modules/active/")
        self.assertEqual(res.status_code, 403)

    def test_anonymous(self):
        self.client.force_authenticate(user=None)
        res = self.client.get("/api/modules/active/")
        self.assertEqual(res.status_code, 401)
