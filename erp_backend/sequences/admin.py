# sequences/admin.py

from django.contrib import admin

from sequences.models import DocumentSequence


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("tenant", "document_type", "next_value", "updated_at")
    list_filter = ("document_type",)
    readonly_fields = ("next_value", "updated_at")
