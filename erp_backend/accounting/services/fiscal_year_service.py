# accounting/services/fiscal_year_service.py

"""
======================================================
PATH: accounting/services/fiscal_year_service.py
======================================================
FISCAL YEAR MANAGER

- create: start < end, no overlap, unique name (per tenant)
- lock / unlock: idempotent toggles under a row lock
  (journal_entry_service takes the same lock before posting, so a post and
  a lock on the same fiscal year never interleave)
- locking never rewrites or deletes entries already posted
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.fiscal_year import FiscalYear
from core.errors import ConflictError, InvalidInputError, InvalidRangeError, NotFoundError
from tenants.context import require_tenant_id

logger = logging.getLogger("accounting")


def get_fiscal_year(*, tenant_id, fiscal_year_id, for_update: bool = False) -> FiscalYear:
    require_tenant_id(tenant_id)
    qs = FiscalYear.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=fiscal_year_id, tenant_id=tenant_id)
    except (FiscalYear.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Fiscal year not found") from exc


def find_fiscal_year_for_date(*, tenant_id, on_date) -> FiscalYear:
    require_tenant_id(tenant_id)
    fy = (
        FiscalYear.objects.filter(
            tenant_id=tenant_id, start_date__lte=on_date, end_date__gte=on_date
        )
        .order_by("start_date")
        .first()
    )
    if fy is None:
        logger.warning(
            "No fiscal year covers posting date",
            extra={"tenant_id": str(tenant_id), "date": str(on_date)},
        )
        raise NotFoundError(f"No fiscal year covers {on_date}")
    return fy


@transaction.atomic
def create_fiscal_year(*, tenant_id, name: str, start_date, end_date) -> FiscalYear:
    require_tenant_id(tenant_id)

    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Fiscal year name is required")
    if start_date is None or end_date is None:
        raise InvalidInputError("start_date and end_date are required")
    if end_date <= start_date:
        raise InvalidRangeError("End date must be after start date")

    if FiscalYear.objects.filter(tenant_id=tenant_id, name=name).exists():
        raise ConflictError(f"Fiscal year {name!r} already exists")

    overlapping = FiscalYear.objects.filter(
        tenant_id=tenant_id, start_date__lte=end_date, end_date__gte=start_date
    ).first()
    if overlapping is not None:
        raise ConflictError(f"Fiscal year overlaps {overlapping.name}")

    try:
        with transaction.atomic():
            fy = FiscalYear.objects.create(
                tenant_id=tenant_id, name=name, start_date=start_date, end_date=end_date
            )
    except IntegrityError as exc:
        raise ConflictError(f"Fiscal year {name!r} already exists") from exc

    logger.info(
        "Fiscal year created",
        extra={
            "tenant_id": str(tenant_id),
            "fiscal_year": name,
            "start_date": str(start_date),
            "end_date": str(end_date),
        },
    )
    return fy


def _set_locked(*, tenant_id, fiscal_year_id, locked: bool) -> FiscalYear:
    fy = get_fiscal_year(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id, for_update=True)
    if fy.is_locked == locked:
        return fy

    fy.is_locked = locked
    fy.locked_at = timezone.now() if locked else None
    fy.save(update_fields=["is_locked", "locked_at", "updated_at"])

    logger.info(
        "Fiscal year locked" if locked else "Fiscal year unlocked",
        extra={"tenant_id": str(tenant_id), "fiscal_year": fy.name},
    )
    return fy


@transaction.atomic
def lock_fiscal_year(*, tenant_id, fiscal_year_id) -> FiscalYear:
    return _set_locked(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id, locked=True)


@transaction.atomic
def unlock_fiscal_year(*, tenant_id, fiscal_year_id) -> FiscalYear:
    return _set_locked(tenant_id=tenant_id, fiscal_year_id=fiscal_year_id, locked=False)


def list_fiscal_years(*, tenant_id):
    require_tenant_id(tenant_id)
    return FiscalYear.objects.filter(tenant_id=tenant_id).order_by("-start_date")
