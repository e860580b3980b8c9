# purchases/services/vendor_service.py

from __future__ import annotations

import logging

from django.db import transaction

from core.errors import InvalidInputError, NotFoundError
from purchases.models import Vendor
from tenants.context import require_tenant_id

logger = logging.getLogger("purchases")


@transaction.atomic
def create_vendor(*, tenant_id, name: str, email: str = "", phone: str = "", address: str = "") -> Vendor:
    require_tenant_id(tenant_id)
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Vendor name is required")

    vendor = Vendor.objects.create(
        tenant_id=tenant_id,
        name=name,
        email=(email or "").strip(),
        phone=(phone or "").strip(),
        address=address or "",
    )
    logger.info("Vendor created", extra={"tenant_id": str(tenant_id), "vendor_id": str(vendor.id)})
    return vendor


def get_vendor(*, tenant_id, vendor_id) -> Vendor:
    require_tenant_id(tenant_id)
    try:
        return Vendor.objects.get(id=vendor_id, tenant_id=tenant_id)
    except (Vendor.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Vendor not found") from exc


def resolve_vendor(*, tenant_id, vendor_id):
    """Optional vendor reference on documents; inactive vendors are rejected."""
    if vendor_id in (None, ""):
        return None
    vendor = get_vendor(tenant_id=tenant_id, vendor_id=vendor_id)
    if not vendor.is_active:
        raise InvalidInputError(f"Vendor {vendor.name} is inactive")
    return vendor


def list_vendors(*, tenant_id, include_inactive: bool = False):
    require_tenant_id(tenant_id)
    qs = Vendor.objects.filter(tenant_id=tenant_id)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")
