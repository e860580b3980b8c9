# core/testing.py

"""
Shared test fixtures.

Plain factory functions (no fixtures framework): every TestCase builds
the rows it needs in setUp.
"""

from __future__ import annotations

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection
from rest_framework.test import APIClient

from tenants.models import Tenant
from tenants.services.module_access import enable_all_modules

User = get_user_model()


def make_tenant(name: str = "Acme Trading", *, modules: bool = True) -> Tenant:
    tenant = Tenant.objects.create(name=name, slug=f"t-{uuid.uuid4().hex[:10]}")
    if modules:
        enable_all_modules(tenant_id=tenant.id)
    return tenant


def make_user(tenant=None, *, email: str | None = None, role: str = User.ROLE_ADMIN):
    return User.objects.create_user(
        email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
        password="password123",
        role=role,
        tenant=tenant,
    )


def api_client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def seed_ledger(tenant, *, year: int = 2024) -> dict:
    """Starter chart + FY <year> and FY <year+1>."""
    from accounting.services.chart_service import seed_starter_accounts

    return seed_starter_accounts(tenant_id=tenant.id, today=date(year, 6, 1))


def account(tenant, code: str):
    from accounting.models.account import Account

    return Account.objects.get(tenant=tenant, code=code)


def fiscal_year(tenant, year: int = 2024):
    from accounting.models.fiscal_year import FiscalYear

    return FiscalYear.objects.get(tenant=tenant, name=f"FY {year}")


def account_balance(tenant, code: str) -> Decimal:
    from accounting.services.ledger_service import get_account_balance

    return get_account_balance(tenant_id=tenant.id, account_id=account(tenant, code).id)


def run_concurrently(fn, *, workers: int = 4) -> list:
    """
    Call fn() from `workers` threads released together by a barrier.

    Each thread uses its own DB connection and closes it when done.
    Exceptions are re-raised in the calling thread.
    """
    barrier = threading.Barrier(workers)

    def _worker():
        try:
            barrier.wait(timeout=10)
            return fn()
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_worker) for _ in range(workers)]
        return [future.result(timeout=30) for future in futures]
