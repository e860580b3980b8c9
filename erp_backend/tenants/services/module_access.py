# tenants/services/module_access.py

"""
MODULE ACCESS SERVICE

Per-tenant enablement of the ACCOUNTING / INVENTORY / PURCHASE / SALES
modules. A tenant with no ModuleAccess row for a module has it disabled.
"""

from __future__ import annotations

import logging

from django.db import transaction

from core.errors import ForbiddenError, InvalidInputError
from tenants.context import require_tenant_id
from tenants.models import Module, ModuleAccess

logger = logging.getLogger("tenants")


def _validate_module(module: str) -> str:
    value = (module or "").strip().upper()
    if value not in Module.values:
        raise InvalidInputError(
            f"Unknown module {module!r}. Expected one of {', '.join(Module.values)}"
        )
    return value


def is_module_enabled(*, tenant_id, module: str) -> bool:
    if not tenant_id:
        return False
    return ModuleAccess.objects.filter(
        tenant_id=tenant_id,
        module=_validate_module(module),
        is_enabled=True,
    ).exists()


def require_module(*, tenant_id, module: str) -> None:
    require_tenant_id(tenant_id)
    module = _validate_module(module)
    if not is_module_enabled(tenant_id=tenant_id, module=module):
        raise ForbiddenError(f"Module {module} is not enabled for your company")


def enabled_modules(*, tenant_id) -> list[str]:
    return list(
        ModuleAccess.objects.filter(tenant_id=tenant_id, is_enabled=True)
        .order_by("module")
        .values_list("module", flat=True)
    )


@transaction.atomic
def set_module_enabled(*, tenant_id, module: str, enabled: bool) -> ModuleAccess:
    require_tenant_id(tenant_id)
    module = _validate_module(module)

    access, _ = ModuleAccess.objects.select_for_update().get_or_create(
        tenant_id=tenant_id,
        module=module,
        defaults={"is_enabled": enabled},
    )
    if access.is_enabled != enabled:
        access.is_enabled = enabled
        access.save(update_fields=["is_enabled", "updated_at"])

    logger.info(
        "Module access changed",
        extra={"tenant_id": str(tenant_id), "module": module, "enabled": enabled},
    )
    return access


def enable_all_modules(*, tenant_id) -> list[str]:
    for module in Module.values:
        set_module_enabled(tenant_id=tenant_id, module=module, enabled=True)
    return enabled_modules(tenant_id=tenant_id)
