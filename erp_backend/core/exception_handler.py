# core/exception_handler.py

"""
DRF EXCEPTION HANDLER

Renders service errors as:
    {"detail": "...", "code": "..."}
with the status carried by the error kind.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.errors import ERPServiceError

logger = logging.getLogger("erp")


def _validation_detail(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return exc.messages


def erp_exception_handler(exc, context):
    if isinstance(exc, ERPServiceError):
        view = context.get("view")
        logger.info(
            "Service error",
            extra={
                "code": exc.code,
                "view": view.__class__.__name__ if view else None,
                "detail": str(exc),
            },
        )
        return Response({"detail": str(exc), "code": exc.code}, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response(
            {"detail": _validation_detail(exc), "code": "invalid_input"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    return exception_handler(exc, context)
