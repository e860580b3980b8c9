# sales/services/crm_service.py

"""
======================================================
PATH: sales/services/crm_service.py
======================================================
CUSTOMERS + LEADS

- Lead status moves freely until it is closed (WON / LOST)
- convert_lead_to_customer is one-way:
    already converted -> Conflict
    LOST              -> InvalidState
  creates the Customer, lead becomes WON and links it
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.errors import ConflictError, InvalidInputError, InvalidStateError, NotFoundError
from core.money import money
from sales.models import CLOSED_LEAD_STATUSES, Customer, Lead, LeadSource, LeadStatus
from tenants.context import require_tenant_id

logger = logging.getLogger("sales")


def _clean(value) -> str:
    return (value or "").strip()


# ============================================================
# CUSTOMERS
# ============================================================


@transaction.atomic
def create_customer(
    *,
    tenant_id,
    name: str,
    email: str = "",
    phone: str = "",
    company: str = "",
    address: str = "",
) -> Customer:
    require_tenant_id(tenant_id)
    if not _clean(name):
        raise InvalidInputError("Customer name is required")

    customer = Customer.objects.create(
        tenant_id=tenant_id,
        name=_clean(name),
        email=_clean(email),
        phone=_clean(phone),
        company=_clean(company),
        address=address or "",
    )
    logger.info("Customer created", extra={"tenant_id": str(tenant_id), "customer_id": str(customer.id)})
    return customer


def get_customer(*, tenant_id, customer_id) -> Customer:
    require_tenant_id(tenant_id)
    try:
        return Customer.objects.get(id=customer_id, tenant_id=tenant_id)
    except (Customer.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Customer not found") from exc


def resolve_customer(*, tenant_id, customer_id):
    """Optional customer reference on documents; inactive customers are rejected."""
    if customer_id in (None, ""):
        return None
    customer = get_customer(tenant_id=tenant_id, customer_id=customer_id)
    if not customer.is_active:
        raise InvalidInputError(f"Customer {customer.name} is inactive")
    return customer


def list_customers(*, tenant_id, search: str | None = None):
    require_tenant_id(tenant_id)
    qs = Customer.objects.filter(tenant_id=tenant_id, is_active=True)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search) | Q(company__icontains=search))
    return qs.order_by("name")


# ============================================================
# LEADS
# ============================================================


def _lock_lead(tenant_id, lead_id) -> Lead:
    require_tenant_id(tenant_id)
    try:
        return Lead.objects.select_for_update().get(id=lead_id, tenant_id=tenant_id)
    except (Lead.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Lead not found") from exc


def get_lead(*, tenant_id, lead_id) -> Lead:
    require_tenant_id(tenant_id)
    try:
        return Lead.objects.select_related("customer").get(id=lead_id, tenant_id=tenant_id)
    except (Lead.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Lead not found") from exc


@transaction.atomic
def create_lead(
    *,
    tenant_id,
    name: str,
    email: str = "",
    phone: str = "",
    company: str = "",
    source: str = LeadSource.OTHER,
    expected_revenue=None,
    notes: str = "",
) -> Lead:
    require_tenant_id(tenant_id)
    if not _clean(name):
        raise InvalidInputError("Lead name is required")

    source = _clean(source).upper() or LeadSource.OTHER
    if source not in LeadSource.values:
        raise InvalidInputError(f"Invalid source. Must be one of: {', '.join(LeadSource.values)}")

    if expected_revenue not in (None, ""):
        expected_revenue = money(expected_revenue)
        if expected_revenue < 0:
            raise InvalidInputError("expected_revenue cannot be negative")
    else:
        expected_revenue = None

    lead = Lead.objects.create(
        tenant_id=tenant_id,
        name=_clean(name),
        email=_clean(email),
        phone=_clean(phone),
        company=_clean(company),
        source=source,
        expected_revenue=expected_revenue,
        notes=notes or "",
    )
    logger.info("Lead created", extra={"tenant_id": str(tenant_id), "lead_id": str(lead.id), "source": source})
    return lead


@transaction.atomic
def update_lead_status(*, tenant_id, lead_id, status: str) -> Lead:
    """
    Pipeline moves between open statuses. WON is reached only by conversion;
    a closed lead never reopens.
    """
    lead = _lock_lead(tenant_id, lead_id)

    status = _clean(status).upper()
    if status not in LeadStatus.values:
        raise InvalidInputError(f"Invalid status. Must be one of: {', '.join(LeadStatus.values)}")
    if lead.is_closed:
        raise InvalidStateError(f"Lead {lead.name} is closed ({lead.status})", current=lead.status)
    if status == LeadStatus.WON:
        raise InvalidStateError("A lead is won by converting it to a customer")

    lead.status = status
    lead.save(update_fields=["status", "updated_at"])
    logger.info("Lead status changed", extra={"tenant_id": str(tenant_id), "lead_id": str(lead.id), "status": status})
    return lead


@transaction.atomic
def convert_lead_to_customer(
    *,
    tenant_id,
    lead_id,
    name: str = "",
    email: str = "",
    phone: str = "",
    company: str = "",
    address: str = "",
) -> Customer:
    lead = _lock_lead(tenant_id, lead_id)

    if lead.customer_id:
        raise ConflictError(f"Lead {lead.name} is already converted")
    if lead.status == LeadStatus.LOST:
        raise InvalidStateError(f"Cannot convert a lost lead ({lead.name})", current=lead.status)

    customer = create_customer(
        tenant_id=tenant_id,
        name=_clean(name) or lead.name,
        email=_clean(email) or lead.email,
        phone=_clean(phone) or lead.phone,
        company=_clean(company) or lead.company,
        address=address,
    )

    lead.customer = customer
    lead.status = LeadStatus.WON
    lead.converted_at = timezone.now()
    lead.save(update_fields=["customer", "status", "converted_at", "updated_at"])

    logger.info(
        "Lead converted",
        extra={"tenant_id": str(tenant_id), "lead_id": str(lead.id), "customer_id": str(customer.id)},
    )
    return customer


def list_leads(*, tenant_id, status: str | None = None, source: str | None = None, search: str | None = None):
    require_tenant_id(tenant_id)
    qs = Lead.objects.filter(tenant_id=tenant_id).select_related("customer")
    if status:
        qs = qs.filter(status=status.upper())
    if source:
        qs = qs.filter(source=source.upper())
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search) | Q(company__icontains=search))
    return qs.order_by("-created_at")


def lead_pipeline(*, tenant_id) -> dict:
    """Lead count and expected revenue per status, every status listed."""
    require_tenant_id(tenant_id)
    rows = {
        row["status"]: row
        for row in Lead.objects.filter(tenant_id=tenant_id)
        .values("status")
        .annotate(count=Count("id"), expected_revenue=Sum("expected_revenue"))
    }
    pipeline = [
        {
            "status": status,
            "count": rows.get(status, {}).get("count", 0),
            "expected_revenue": money(rows.get(status, {}).get("expected_revenue") or Decimal("0")),
        }
        for status in LeadStatus.values
    ]
    return {
        "pipeline": pipeline,
        "total": sum(p["count"] for p in pipeline),
        "open": sum(p["count"] for p in pipeline if p["status"] not in CLOSED_LEAD_STATUSES),
    }
