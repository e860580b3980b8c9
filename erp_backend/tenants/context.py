# tenants/context.py

"""
TENANT CONTEXT

The ONLY way views learn which tenant they act for.
The tenant comes from the authenticated caller, never from the payload.
"""

from __future__ import annotations

from core.errors import ForbiddenError

COMPANY_CONTEXT_REQUIRED = "Company context required"


def require_tenant_id(tenant_id):
    if not tenant_id:
        raise ForbiddenError(COMPANY_CONTEXT_REQUIRED)
    return tenant_id


def resolve_tenant_id(request):
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        raise ForbiddenError(COMPANY_CONTEXT_REQUIRED)

    tenant_id = getattr(user, "tenant_id", None)
    if not tenant_id:
        raise ForbiddenError(COMPANY_CONTEXT_REQUIRED)

    tenant = getattr(user, "tenant", None)
    if tenant is not None and not tenant.is_active:
        raise ForbiddenError("Company is inactive")

    return tenant_id
