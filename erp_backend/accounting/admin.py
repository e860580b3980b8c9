# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear
from accounting.models.journal import JournalEntry, JournalLine

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "tenant",
        "parent",
        "is_active",
    )
    list_filter = ("account_type", "is_active", "tenant")
    search_fields = ("code", "name")
    ordering = ("tenant", "code")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("tenant", "code", "name", "account_type", "parent"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# FISCAL YEAR
# ============================================================


@admin.register(FiscalYear)
class FiscalYearAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "start_date", "end_date", "is_locked", "locked_at")
    list_filter = ("is_locked", "tenant")
    search_fields = ("name",)
    ordering = ("tenant", "-start_date")
    readonly_fields = ("is_locked", "locked_at", "created_at", "updated_at")


# ============================================================
# JOURNAL ENTRY (STRICTLY IMMUTABLE)
# ============================================================


class JournalLineInline(admin.TabularInline):
    model = JournalLine
    extra = 0
    fields = ("account", "debit", "credit", "memo")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "tenant",
        "date",
        "reference",
        "fiscal_year",
        "created_at",
    )
    list_filter = ("tenant", "fiscal_year", "date")
    search_fields = ("memo", "reference")
    ordering = ("-date", "-id")
    inlines = [JournalLineInline]

    readonly_fields = (
        "tenant",
        "fiscal_year",
        "date",
        "reference",
        "memo",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
