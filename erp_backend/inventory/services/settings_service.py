# inventory/services/settings_service.py

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from core.errors import InvalidInputError
from inventory.models import InventorySettings, MoveType, PurchaseStockRecognition
from tenants.context import require_tenant_id

logger = logging.getLogger("inventory")

_UNSET = object()


def get_inventory_settings(*, tenant_id, for_update: bool = False) -> InventorySettings:
    """Per-tenant settings row, created with defaults on first read."""
    require_tenant_id(tenant_id)
    qs = InventorySettings.objects.all()
    if for_update:
        qs = qs.select_for_update()

    obj = qs.filter(tenant_id=tenant_id).first()
    if obj is not None:
        return obj

    try:
        with transaction.atomic():
            return InventorySettings.objects.create(tenant_id=tenant_id)
    except IntegrityError:
        return qs.get(tenant_id=tenant_id)


@transaction.atomic
def update_inventory_settings(
    *,
    tenant_id,
    purchase_stock_recognition=_UNSET,
    auto_post_receipts=_UNSET,
    negative_stock_move_types=_UNSET,
    post_stock_valuation=_UNSET,
) -> InventorySettings:
    obj = get_inventory_settings(tenant_id=tenant_id, for_update=True)

    if purchase_stock_recognition is not _UNSET:
        value = str(purchase_stock_recognition or "").strip().upper()
        if value not in PurchaseStockRecognition.values:
            raise InvalidInputError(
                f"purchase_stock_recognition must be one of: {', '.join(PurchaseStockRecognition.values)}"
            )
        obj.purchase_stock_recognition = value

    if auto_post_receipts is not _UNSET:
        obj.auto_post_receipts = bool(auto_post_receipts)

    if negative_stock_move_types is not _UNSET:
        types = [str(t).strip().upper() for t in (negative_stock_move_types or [])]
        unknown = [t for t in types if t not in MoveType.values]
        if unknown:
            raise InvalidInputError(f"Unknown move types: {', '.join(unknown)}")
        obj.negative_stock_move_types = sorted(set(types))

    if post_stock_valuation is not _UNSET:
        obj.post_stock_valuation = bool(post_stock_valuation)

    obj.save()

    logger.info(
        "Inventory settings updated",
        extra={
            "tenant_id": str(tenant_id),
            "purchase_stock_recognition": obj.purchase_stock_recognition,
            "auto_post_receipts": obj.auto_post_receipts,
            "negative_stock_move_types": obj.negative_stock_move_types,
            "post_stock_valuation": obj.post_stock_valuation,
        },
    )
    return obj
