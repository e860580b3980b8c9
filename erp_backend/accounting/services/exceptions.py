# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Accounting-specific refinements of the shared ERP error kinds.
Catch the core kinds (NotFoundError, ForbiddenError, ...) when the exact
accounting cause does not matter.
"""

from core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)


class AccountResolutionError(NotFoundError):
    """Raised when an expected account cannot be resolved for a tenant."""


class FiscalYearLockedError(ForbiddenError):
    """Raised when posting into a locked fiscal year."""


class DuplicateReferenceError(ConflictError):
    """Raised on duplicate or retried accounting events (same reference)."""


class JournalEntryCreationError(InvalidInputError):
    """Raised when journal lines are malformed."""
