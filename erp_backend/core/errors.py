# core/errors.py

"""
ERP SERVICE ERRORS

Centralized domain errors shared by every service layer.

Each error kind carries the HTTP status and machine code the API layer
renders (see core/exception_handler.py). Services raise these BEFORE any
persistent mutation; callers never see a partially applied operation.
"""

from __future__ import annotations


class ERPServiceError(Exception):
    """Base exception for all ERP service failures."""

    status_code = 400
    code = "error"

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidInputError(ERPServiceError):
    """Raised when a payload is malformed (unknown enum, negative amount, ...)."""

    status_code = 400
    code = "invalid_input"


class NotFoundError(ERPServiceError):
    """Entity absent, or it belongs to a different tenant."""

    status_code = 404
    code = "not_found"


class ForbiddenError(ERPServiceError):
    """Missing tenant context, disabled module or locked fiscal year."""

    status_code = 403
    code = "forbidden"


class InvalidStateError(ERPServiceError):
    """Lifecycle transition attempted from the wrong state."""

    status_code = 409
    code = "invalid_state"


class ConflictError(ERPServiceError):
    """Duplicate post, duplicate number or concurrent mutation detected."""

    status_code = 409
    code = "conflict"


class UnbalancedEntryError(ERPServiceError):
    """Journal entry debits and credits differ beyond tolerance."""

    status_code = 422
    code = "unbalanced"


class InvalidRangeError(ERPServiceError):
    """Date outside the fiscal year (or an inverted date range)."""

    status_code = 422
    code = "invalid_range"


class InsufficientStockError(ERPServiceError):
    """A stock post would drive an on-hand balance negative."""

    status_code = 409
    code = "insufficient_stock"
