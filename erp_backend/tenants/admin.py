# tenants/admin.py

from django.contrib import admin

from tenants.models import ModuleAccess, Tenant


class ModuleAccessInline(admin.TabularInline):
    model = ModuleAccess
    extra = 0


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "slug")
    inlines = [ModuleAccessInline]
