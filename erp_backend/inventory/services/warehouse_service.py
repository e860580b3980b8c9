# inventory/services/warehouse_service.py

"""
WAREHOUSES & LOCATIONS

create_warehouse also creates:
  MAIN  normal stock location
  QUAR  quarantine location

Default stock location (used by purchase receipts and sales issues):
  first active non-quarantine location of the oldest active warehouse.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from core.errors import ConflictError, InvalidInputError, NotFoundError
from inventory.models import Location, Warehouse
from tenants.context import require_tenant_id

logger = logging.getLogger("inventory")

DEFAULT_LOCATIONS = (
    ("MAIN", "Main Stock", False),
    ("QUAR", "Quarantine", True),
)


def get_warehouse(*, tenant_id, warehouse_id) -> Warehouse:
    require_tenant_id(tenant_id)
    try:
        return Warehouse.objects.get(id=warehouse_id, tenant_id=tenant_id)
    except (Warehouse.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Warehouse not found") from exc


def get_location(*, tenant_id, location_id) -> Location:
    require_tenant_id(tenant_id)
    try:
        return Location.objects.select_related("warehouse").get(id=location_id, tenant_id=tenant_id)
    except (Location.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Location not found") from exc


def list_warehouses(*, tenant_id):
    require_tenant_id(tenant_id)
    return Warehouse.objects.filter(tenant_id=tenant_id).prefetch_related("locations").order_by("created_at")


@transaction.atomic
def create_warehouse(*, tenant_id, code: str, name: str, address: str = "") -> Warehouse:
    require_tenant_id(tenant_id)

    code = (code or "").strip().upper()
    name = (name or "").strip()
    if not code or not name:
        raise InvalidInputError("Warehouse code and name are required")

    if Warehouse.objects.filter(tenant_id=tenant_id, code=code).exists():
        raise ConflictError(f"Warehouse {code} already exists")

    try:
        with transaction.atomic():
            warehouse = Warehouse.objects.create(
                tenant_id=tenant_id, code=code, name=name, address=address or ""
            )
    except IntegrityError as exc:
        raise ConflictError(f"Warehouse {code} already exists") from exc

    for loc_code, loc_name, quarantine in DEFAULT_LOCATIONS:
        Location.objects.create(
            tenant_id=tenant_id,
            warehouse=warehouse,
            code=loc_code,
            name=loc_name,
            is_quarantine=quarantine,
        )

    logger.info(
        "Warehouse created",
        extra={"tenant_id": str(tenant_id), "warehouse_id": str(warehouse.id), "code": code},
    )
    return warehouse


@transaction.atomic
def create_location(
    *, tenant_id, warehouse_id, code: str, name: str, is_quarantine: bool = False
) -> Location:
    warehouse = get_warehouse(tenant_id=tenant_id, warehouse_id=warehouse_id)

    code = (code or "").strip().upper()
    name = (name or "").strip()
    if not code or not name:
        raise InvalidInputError("Location code and name are required")

    if Location.objects.filter(warehouse=warehouse, code=code).exists():
        raise ConflictError(f"Location {code} already exists in {warehouse.code}")

    try:
        with transaction.atomic():
            location = Location.objects.create(
                tenant_id=tenant_id,
                warehouse=warehouse,
                code=code,
                name=name,
                is_quarantine=bool(is_quarantine),
            )
    except IntegrityError as exc:
        raise ConflictError(f"Location {code} already exists in {warehouse.code}") from exc

    logger.info(
        "Location created",
        extra={
            "tenant_id": str(tenant_id),
            "location_id": str(location.id),
            "warehouse": warehouse.code,
            "code": code,
            "is_quarantine": location.is_quarantine,
        },
    )
    return location


def get_default_stock_location(*, tenant_id) -> Location:
    require_tenant_id(tenant_id)
    location = (
        Location.objects.select_related("warehouse")
        .filter(
            tenant_id=tenant_id,
            is_active=True,
            is_quarantine=False,
            warehouse__is_active=True,
        )
        .order_by("warehouse__created_at", "created_at")
        .first()
    )
    if location is None:
        raise NotFoundError("No stock location configured. Create a warehouse in Inventory first.")
    return location
