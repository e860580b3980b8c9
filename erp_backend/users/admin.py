# users/admin.py

"""
USERS ADMIN REGISTRATION

Operators create staff users here and bind them to a tenant.
A user without a tenant can sign in but gets 403 on every ERP endpoint.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("tenant__name", "email")
    list_display = ("email", "tenant", "role", "is_active", "is_staff")
    list_filter = ("tenant", "role", "is_active", "is_staff")
    list_select_related = ("tenant",)
    search_fields = ("email", "first_name", "last_name", "tenant__name")
    autocomplete_fields = ("tenant",)
    readonly_fields = ("last_login", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Company", {"fields": ("tenant", "role")}),
        ("Profile", {"fields": ("first_name", "last_name")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("System Fields", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "tenant", "role", "is_staff"),
            },
        ),
    )
