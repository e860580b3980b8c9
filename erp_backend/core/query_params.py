# core/query_params.py

"""Query-string parsing shared by the read endpoints (bad values -> 400)."""

from __future__ import annotations

import uuid

from django.utils.dateparse import parse_date

from core.errors import InvalidInputError

TRUTHY = ("1", "true", "yes")


def parse_date_param(request, name: str):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    d = parse_date(str(raw).strip())
    if d is None:
        raise InvalidInputError(f"Invalid {name} (expected YYYY-MM-DD)")
    return d


def parse_int_param(request, name: str):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be an integer") from exc


def parse_uuid_param(request, name: str):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return uuid.UUID(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a UUID") from exc


def parse_bool_param(request, name: str) -> bool:
    return str(request.query_params.get(name, "")).strip().lower() in TRUTHY
