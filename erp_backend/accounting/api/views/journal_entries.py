"""
PATH: accounting/api/views/journal_entries.py

JOURNAL ENTRY API

POST /api/accounting/journal-entries/post/     manual entry through the engine
GET  /api/accounting/journal-entries/          read-only, audit-safe (router)
GET  /api/accounting/journal-entries/<id>/

Entries are immutable: there is no update or delete endpoint.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers import JournalEntryCreateSerializer, JournalEntrySerializer
from accounting.models.journal import JournalEntry
from accounting.services.journal_entry_service import get_journal_entry, post_journal_entry
from tenants.api.views import TenantAPIView, TenantReadOnlyViewSet
from tenants.models import Module


class JournalEntryPostView(TenantAPIView):
    required_module = Module.ACCOUNTING
    serializer_class = JournalEntryCreateSerializer

    @extend_schema(tags=["accounting"], request=JournalEntryCreateSerializer, responses={201: JournalEntrySerializer})
    def post(self, request):
        s = JournalEntryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        entry = post_journal_entry(
            tenant_id=self.tenant_id,
            fiscal_year_id=data["fiscal_year_id"],
            date=data["date"],
            lines=[dict(line) for line in data["lines"]],
            reference=data.get("reference"),
            memo=data.get("memo", ""),
        )
        entry = get_journal_entry(tenant_id=self.tenant_id, journal_entry_id=entry.id)
        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(TenantReadOnlyViewSet):
    """
    Read-only access to journal entries.

    Filtering (django-filter):
    - ?fiscal_year=<id>
    - ?date=<YYYY-MM-DD>
    - ?reference=<exact>
    """

    required_module = Module.ACCOUNTING
    serializer_class = JournalEntrySerializer
    queryset = (
        JournalEntry.objects.select_related("fiscal_year")
        .prefetch_related("lines__account")
        .order_by("-date", "-id")
    )
    filterset_fields = ["fiscal_year", "date", "reference"]
