# sequences/services/sequence_service.py

"""
======================================================
PATH: sequences/services/sequence_service.py
======================================================
SEQUENCE GENERATOR

Produces "<PREFIX>-<5-digit ordinal>" document numbers per
(tenant, document type).

Rules:
- The counter row is locked with select_for_update and incremented in the
  caller's transaction. A rolled-back document insert rolls back its number.
- Counters are seeded from the existing document count the first time a
  (tenant, type) pair is numbered.
- A number that already exists (imported rows, manual inserts) is skipped,
  never reused. After ERP_SEQUENCE_MAX_ATTEMPTS clashes we give up with
  ConflictError.

Numbers are dense in creation order but NOT gapless.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from django.conf import settings
from django.db import IntegrityError, transaction

from core.errors import ConflictError, InvalidInputError
from sequences.models import DocumentSequence, DocumentType
from tenants.context import require_tenant_id

logger = logging.getLogger("sequences")

T = TypeVar("T")

NUMBER_WIDTH = 5


def format_number(document_type: str, value: int) -> str:
    return f"{document_type}-{int(value):0{NUMBER_WIDTH}d}"


def _validate_document_type(document_type: str) -> str:
    value = (document_type or "").strip().upper()
    if value not in DocumentType.values:
        raise InvalidInputError(f"Unknown document type {document_type!r}")
    return value


def _lock_sequence(*, tenant_id, document_type: str, model=None) -> DocumentSequence:
    try:
        return DocumentSequence.objects.select_for_update().get(
            tenant_id=tenant_id,
            document_type=document_type,
        )
    except DocumentSequence.DoesNotExist:
        start = 1
        if model is not None:
            start = model.objects.filter(tenant_id=tenant_id).count() + 1
        try:
            with transaction.atomic():
                return DocumentSequence.objects.create(
                    tenant_id=tenant_id,
                    document_type=document_type,
                    next_value=start,
                )
        except IntegrityError:
            # another transaction created the counter first
            return DocumentSequence.objects.select_for_update().get(
                tenant_id=tenant_id,
                document_type=document_type,
            )


@transaction.atomic
def next_number(*, tenant_id, document_type: str, model=None) -> str:
    require_tenant_id(tenant_id)
    document_type = _validate_document_type(document_type)

    seq = _lock_sequence(tenant_id=tenant_id, document_type=document_type, model=model)
    value = seq.next_value
    seq.next_value = value + 1
    seq.save(update_fields=["next_value", "updated_at"])

    return format_number(document_type, value)


def peek_next_number(*, tenant_id, document_type: str) -> str:
    document_type = _validate_document_type(document_type)
    seq = DocumentSequence.objects.filter(
        tenant_id=tenant_id, document_type=document_type
    ).first()
    return format_number(document_type, seq.next_value if seq else 1)


def create_numbered(
    *,
    tenant_id,
    document_type: str,
    model,
    create: Callable[[str], T],
    max_attempts: int | None = None,
) -> T:
    """
    Allocate a number and run create(number) in a savepoint.

    `model` must have (tenant, number) fields; it is used to detect a number
    clash and to seed a brand-new counter.
    """
    attempts = int(max_attempts or getattr(settings, "ERP_SEQUENCE_MAX_ATTEMPTS", 5))

    for attempt in range(1, attempts + 1):
        number = next_number(tenant_id=tenant_id, document_type=document_type, model=model)

        if model.objects.filter(tenant_id=tenant_id, number=number).exists():
            logger.warning(
                "Document number already taken; skipping",
                extra={
                    "tenant_id": str(tenant_id),
                    "document_type": document_type,
                    "number": number,
                    "attempt": attempt,
                },
            )
            continue

        try:
            with transaction.atomic():
                return create(number)
        except IntegrityError:
            if not model.objects.filter(tenant_id=tenant_id, number=number).exists():
                raise
            logger.warning(
                "Document number clash on insert; retrying",
                extra={
                    "tenant_id": str(tenant_id),
                    "document_type": document_type,
                    "number": number,
                    "attempt": attempt,
                },
            )

    raise ConflictError(
        f"Could not allocate a unique {document_type} number after {attempts} attempts",
        document_type=document_type,
    )
