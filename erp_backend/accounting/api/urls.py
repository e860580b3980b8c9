# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounting.api.views.accounts import (
    AccountDetailView,
    AccountListCreateView,
    SeedStarterChartView,
)
from accounting.api.views.fiscal_years import (
    FiscalYearListCreateView,
    FiscalYearLockView,
    FiscalYearUnlockView,
)
from accounting.api.views.journal_entries import JournalEntryPostView, JournalEntryViewSet
from accounting.api.views.ledger import AccountBalanceView, LedgerView
from accounting.api.views.reports import BalanceSheetView, ProfitAndLossView, TrialBalanceView

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")

urlpatterns = [
    # Posting (before the router so "post/" is not taken for a pk)
    path("journal-entries/post/", JournalEntryPostView.as_view(), name="journal-entry-post"),
    path("", include(router.urls)),
    # Chart of accounts
    path("accounts/", AccountListCreateView.as_view(), name="accounts"),
    path("accounts/seed/", SeedStarterChartView.as_view(), name="accounts-seed"),
    path("accounts/<int:account_id>/", AccountDetailView.as_view(), name="account-detail"),
    path("accounts/<int:account_id>/balance/", AccountBalanceView.as_view(), name="account-balance"),
    # Fiscal years
    path("fiscal-years/", FiscalYearListCreateView.as_view(), name="fiscal-years"),
    path("fiscal-years/<int:fiscal_year_id>/lock/", FiscalYearLockView.as_view(), name="fiscal-year-lock"),
    path("fiscal-years/<int:fiscal_year_id>/unlock/", FiscalYearUnlockView.as_view(), name="fiscal-year-unlock"),
    # Reads
    path("ledger/", LedgerView.as_view(), name="ledger"),
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("profit-and-loss/", ProfitAndLossView.as_view(), name="profit-and-loss"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
]
