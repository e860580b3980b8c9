from accounting.api.serializers.accounts import AccountCreateSerializer, AccountSerializer, AccountUpdateSerializer
from accounting.api.serializers.fiscal_years import FiscalYearCreateSerializer, FiscalYearSerializer
from accounting.api.serializers.journal_entries import (
    JournalEntryCreateSerializer,
    JournalEntrySerializer,
    JournalLineSerializer,
)

__all__ = [
    "AccountSerializer",
    "AccountCreateSerializer",
    "AccountUpdateSerializer",
    "FiscalYearSerializer",
    "FiscalYearCreateSerializer",
    "JournalEntrySerializer",
    "JournalEntryCreateSerializer",
    "JournalLineSerializer",
]
