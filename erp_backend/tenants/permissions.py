# tenants/permissions.py

from __future__ import annotations

from rest_framework.permissions import BasePermission

from tenants.context import resolve_tenant_id
from tenants.services.module_access import require_module


class HasTenantContext(BasePermission):
    """
    Require an authenticated caller bound to a tenant.

    Raises ForbiddenError (rendered as 403 with a clear message)
    instead of returning False.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        resolve_tenant_id(request)
        return True


class ModuleEnabled(BasePermission):
    """
    Require the view's module to be enabled for the caller's tenant.

    Usage:
        permission_classes = [IsAuthenticated, HasTenantContext, ModuleEnabled]
        view.required_module = Module.PURCHASE
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_module", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        require_module(tenant_id=resolve_tenant_id(request), module=required)
        return True
