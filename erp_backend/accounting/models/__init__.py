# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import DEBIT_NORMAL_TYPES, Account, AccountType
from accounting.models.fiscal_year import FiscalYear
from accounting.models.journal import JournalEntry, JournalLine

__all__ = [
    "Account",
    "AccountType",
    "DEBIT_NORMAL_TYPES",
    "FiscalYear",
    "JournalEntry",
    "JournalLine",
]
