# core/money.py

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.errors import InvalidInputError

TWOPLACES = Decimal("0.01")
THREEPLACES = Decimal("0.001")
ZERO = Decimal("0.00")

# largest values the DecimalField(max_digits=14) columns can store
MAX_MONEY = Decimal("999999999999.99")
MAX_QUANTITY = Decimal("99999999999.999")


def _to_decimal(value, *, label: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    if isinstance(value, float):
        value = repr(value)

    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidInputError(f"Invalid {label} value: {value!r}") from exc


def money(value) -> Decimal:
    """Round half-up to currency precision (0.01)."""
    amt = _to_decimal(value, label="money")
    if not amt.is_finite():
        raise InvalidInputError(f"Invalid money value: {value!r}")
    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def quantity(value) -> Decimal:
    qty = _to_decimal(value, label="quantity")
    if not qty.is_finite():
        raise InvalidInputError(f"Invalid quantity value: {value!r}")
    return qty.quantize(THREEPLACES, rounding=ROUND_HALF_UP)


def rate(value) -> Decimal:
    """Tax rates are fractions (0.15 == 15%)."""
    r = _to_decimal(value, label="rate")
    if not r.is_finite() or r < 0:
        raise InvalidInputError(f"Invalid rate value: {value!r}")
    return r


def check_money_limit(value: Decimal, *, label: str = "amount") -> Decimal:
    if abs(value) > MAX_MONEY:
        raise InvalidInputError(f"{label} {value} exceeds the maximum of {MAX_MONEY}", limit=str(MAX_MONEY))
    return value


def check_quantity_limit(value: Decimal, *, label: str = "quantity") -> Decimal:
    if abs(value) > MAX_QUANTITY:
        raise InvalidInputError(f"{label} {value} exceeds the maximum of {MAX_QUANTITY}", limit=str(MAX_QUANTITY))
    return value
