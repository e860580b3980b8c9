# inventory/services/stock_move_service.py

"""
======================================================
PATH: inventory/services/stock_move_service.py
======================================================
STOCK MOVE SERVICE (INVENTORY LEDGER ENGINE)

This module is the ONLY place allowed to change StockBalance.

Signed deltas per move type:
  RECEIPT     +qty at location
  ISSUE       -qty at location
  ADJUSTMENT  signed qty at location
  TRANSFER    -qty at from_location, +qty at to_location
  QUARANTINE  same as TRANSFER; exactly one side is a quarantine location

post_stock_move:
  1) lock the move row; already posted -> ConflictError
  2) lock every affected StockBalance row in a stable (sorted) key order
  3) reject the WHOLE post if any balance would go negative, unless the
     tenant allows negative stock for this move type
  4) apply deltas, snapshot unit_cost = product.standard_cost
  5) optional valuation journal (SM:<number>) through the accounting engine
All of it in one transaction: nothing partial is ever visible.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import IntegrityError, models, transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.services import posting
from core.errors import ConflictError, InsufficientStockError, InvalidInputError, NotFoundError
from core.money import ZERO, check_quantity_limit, money, quantity
from inventory.models import (
    SINGLE_LOCATION_TYPES,
    Location,
    MoveType,
    Product,
    StockBalance,
    StockMove,
    StockMoveLine,
)
from inventory.services.settings_service import get_inventory_settings
from inventory.services.warehouse_service import get_default_stock_location
from sequences.models import DocumentType
from sequences.services.sequence_service import create_numbered
from tenants.context import require_tenant_id

logger = logging.getLogger("inventory")

QTY_ZERO = Decimal("0.000")


# ------------------------------------------------------------
# Line validation
# ------------------------------------------------------------


def _ref(raw: dict, name: str):
    """Accept either a model instance under `name` or an id under `<name>_id`."""
    obj = raw.get(name)
    if isinstance(obj, models.Model):
        return obj, None
    return None, raw.get(f"{name}_id", obj)


def _resolve_product(*, tenant_id, raw: dict, idx: int) -> Product:
    product, product_id = _ref(raw, "product")
    if product is None:
        if product_id in (None, ""):
            raise InvalidInputError(f"Line {idx}: product is required")
        try:
            product = Product.objects.get(id=product_id, tenant_id=tenant_id)
        except (Product.DoesNotExist, ValueError, TypeError) as exc:
            raise NotFoundError(f"Line {idx}: product not found") from exc
    elif str(product.tenant_id) != str(tenant_id):
        raise NotFoundError(f"Line {idx}: product not found")

    if not product.is_stockable:
        raise InvalidInputError(f"Line {idx}: {product.sku} is a service and carries no stock")
    return product


def _resolve_location(*, tenant_id, raw: dict, name: str, idx: int) -> Location | None:
    location, location_id = _ref(raw, name)
    if location is None:
        if location_id in (None, ""):
            return None
        try:
            location = Location.objects.get(id=location_id, tenant_id=tenant_id)
        except (Location.DoesNotExist, ValueError, TypeError) as exc:
            raise NotFoundError(f"Line {idx}: {name.replace('_', ' ')} not found") from exc
    elif str(location.tenant_id) != str(tenant_id):
        raise NotFoundError(f"Line {idx}: {name.replace('_', ' ')} not found")

    if not location.is_active:
        raise InvalidInputError(f"Line {idx}: location {location.code} is inactive")
    return location


def _normalize_move_lines(*, tenant_id, move_type: str, lines) -> list[dict]:
    if not lines:
        raise InvalidInputError("At least one line is required")

    out = []
    for idx, raw in enumerate(lines, start=1):
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Line {idx} must be an object")

        product = _resolve_product(tenant_id=tenant_id, raw=raw, idx=idx)
        qty = check_quantity_limit(quantity(raw.get("quantity")), label=f"Line {idx}: quantity")

        location = _resolve_location(tenant_id=tenant_id, raw=raw, name="location", idx=idx)
        from_location = _resolve_location(tenant_id=tenant_id, raw=raw, name="from_location", idx=idx)
        to_location = _resolve_location(tenant_id=tenant_id, raw=raw, name="to_location", idx=idx)

        if move_type in SINGLE_LOCATION_TYPES:
            # RECEIPT may name its target as to_location, ISSUE its source as from_location
            if location is None and move_type == MoveType.RECEIPT:
                location = to_location
            if location is None and move_type == MoveType.ISSUE:
                location = from_location
            if location is None:
                raise InvalidInputError(f"Line {idx}: location is required for {move_type}")

            if move_type == MoveType.ADJUSTMENT:
                if qty == 0:
                    raise InvalidInputError(f"Line {idx}: adjustment quantity cannot be 0")
            elif qty <= 0:
                raise InvalidInputError(f"Line {idx}: quantity must be > 0")

            from_location = to_location = None
        else:
            if from_location is None or to_location is None:
                raise InvalidInputError(f"Line {idx}: from_location and to_location are required for {move_type}")
            if from_location.pk == to_location.pk:
                raise InvalidInputError(f"Line {idx}: from_location and to_location must differ")
            if qty <= 0:
                raise InvalidInputError(f"Line {idx}: quantity must be > 0")
            if move_type == MoveType.QUARANTINE and from_location.is_quarantine == to_location.is_quarantine:
                raise InvalidInputError(
                    f"Line {idx}: a quarantine move needs exactly one quarantine location"
                )
            location = None

        out.append(
            {
                "product": product,
                "location": location,
                "from_location": from_location,
                "to_location": to_location,
                "quantity": qty,
                "memo": (raw.get("memo") or "").strip()[:255],
            }
        )
    return out


def _validate_move_type(move_type) -> str:
    value = str(move_type or "").strip().upper()
    if value not in MoveType.values:
        raise InvalidInputError(f"Invalid stock move type {move_type!r}")
    return value


# ------------------------------------------------------------
# Create
# ------------------------------------------------------------


@transaction.atomic
def create_stock_move(
    *,
    tenant_id,
    move_type: str,
    lines,
    date=None,
    memo: str = "",
    source_reference: str = "",
) -> StockMove:
    require_tenant_id(tenant_id)
    move_type = _validate_move_type(move_type)
    normalized = _normalize_move_lines(tenant_id=tenant_id, move_type=move_type, lines=lines)

    def _create(number: str) -> StockMove:
        move = StockMove.objects.create(
            tenant_id=tenant_id,
            number=number,
            move_type=move_type,
            date=date or timezone.localdate(),
            memo=memo or "",
            source_reference=source_reference or "",
        )
        StockMoveLine.objects.bulk_create(
            [StockMoveLine(move=move, **line) for line in normalized]
        )
        return move

    move = create_numbered(
        tenant_id=tenant_id,
        document_type=DocumentType.STOCK_MOVE,
        model=StockMove,
        create=_create,
    )

    logger.info(
        "Stock move created",
        extra={
            "tenant_id": str(tenant_id),
            "stock_move_id": str(move.id),
            "number": move.number,
            "move_type": move_type,
            "lines": len(normalized),
        },
    )
    return move


# ------------------------------------------------------------
# Post
# ------------------------------------------------------------


def compute_line_deltas(move_type: str, lines) -> "OrderedDict[tuple, Decimal]":
    """
    Pure: signed quantity change per (product_id, location_id).
    lines: StockMoveLine-like objects.
    """
    deltas: OrderedDict = OrderedDict()

    def _add(product_id, location_id, qty):
        key = (product_id, location_id)
        deltas[key] = deltas.get(key, QTY_ZERO) + qty

    for line in lines:
        qty = quantity(line.quantity)
        if move_type == MoveType.RECEIPT:
            _add(line.product_id, line.location_id, qty)
        elif move_type == MoveType.ISSUE:
            _add(line.product_id, line.location_id, -qty)
        elif move_type == MoveType.ADJUSTMENT:
            _add(line.product_id, line.location_id, qty)
        else:
            _add(line.product_id, line.from_location_id, -qty)
            _add(line.product_id, line.to_location_id, qty)
    return deltas


def _lock_balance(*, tenant_id, product_id, location_id) -> StockBalance:
    try:
        return StockBalance.objects.select_for_update().get(product_id=product_id, location_id=location_id)
    except StockBalance.DoesNotExist:
        try:
            with transaction.atomic():
                return StockBalance.objects.create(
                    tenant_id=tenant_id, product_id=product_id, location_id=location_id
                )
        except IntegrityError:
            return StockBalance.objects.select_for_update().get(product_id=product_id, location_id=location_id)


def _valuation_amounts(move_type: str, lines) -> tuple[Decimal, Decimal]:
    """(increase_value, decrease_value) at the unit_cost snapshot."""
    increase = ZERO
    decrease = ZERO
    for line in lines:
        value = money(abs(quantity(line.quantity)) * money(line.unit_cost))
        if move_type == MoveType.RECEIPT:
            increase += value
        elif move_type == MoveType.ISSUE:
            decrease += value
        elif move_type == MoveType.ADJUSTMENT:
            if line.quantity > 0:
                increase += value
            else:
                decrease += value
    return money(increase), money(decrease)


def _should_value(*, tenant_id, settings) -> bool:
    return settings.post_stock_valuation and posting.ledger_enabled(tenant_id=tenant_id)


@transaction.atomic
def post_stock_move(*, tenant_id, stock_move_id, emit_journal: bool = True) -> StockMove:
    """
    emit_journal=False is used by document postings (vendor bill, sales
    invoice) that value the stock inside their own journal entry.
    """
    require_tenant_id(tenant_id)

    try:
        move = StockMove.objects.select_for_update().get(id=stock_move_id, tenant_id=tenant_id)
    except (StockMove.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Stock move not found") from exc

    if move.is_posted:
        raise ConflictError(f"Stock move {move.number} is already posted")

    lines = list(move.lines.select_related("product", "location", "from_location", "to_location"))
    if not lines:
        raise InvalidInputError(f"Stock move {move.number} has no lines")

    settings = get_inventory_settings(tenant_id=tenant_id)
    allow_negative = settings.allows_negative(move.move_type)

    deltas = compute_line_deltas(move.move_type, lines)

    # stable lock order across concurrent posts
    ordered_keys = sorted(deltas.keys(), key=lambda k: (str(k[0]), str(k[1])))
    balances = {
        key: _lock_balance(tenant_id=tenant_id, product_id=key[0], location_id=key[1])
        for key in ordered_keys
    }

    # validate everything before writing anything
    new_quantities = {}
    for key in ordered_keys:
        current = quantity(balances[key].quantity_on_hand)
        new_qty = quantity(current + deltas[key])
        if new_qty < 0 and deltas[key] < 0 and not allow_negative:
            product = next(l.product for l in lines if l.product_id == key[0])
            location = Location.objects.select_related("warehouse").get(pk=key[1])
            logger.info(
                "Stock post rejected: insufficient stock",
                extra={
                    "tenant_id": str(tenant_id),
                    "stock_move": move.number,
                    "sku": product.sku,
                    "location": str(location),
                    "on_hand": str(current),
                    "delta": str(deltas[key]),
                },
            )
            raise InsufficientStockError(
                f"Insufficient stock for {product.sku} at {location}: "
                f"on hand {current}, requested {abs(deltas[key])}",
                sku=product.sku,
                on_hand=str(current),
            )
        check_quantity_limit(new_qty, label="Quantity on hand")
        new_quantities[key] = new_qty

    for key in ordered_keys:
        balance = balances[key]
        balance.quantity_on_hand = new_quantities[key]
        balance.save(update_fields=["quantity_on_hand", "updated_at"])

    for line in lines:
        line.unit_cost = money(line.product.standard_cost)
    StockMoveLine.objects.bulk_update(lines, ["unit_cost"])

    if emit_journal and _should_value(tenant_id=tenant_id, settings=settings):
        increase, decrease = _valuation_amounts(move.move_type, lines)
        move.journal_entry = posting.post_stock_valuation(
            tenant_id=tenant_id,
            move_type=move.move_type,
            date=move.date,
            reference=f"SM:{move.number}",
            increase_value=increase,
            decrease_value=decrease,
            memo=f"Stock move {move.number} ({move.move_type})",
        )

    move.is_posted = True
    move.posted_at = timezone.now()
    move.save(update_fields=["is_posted", "posted_at", "journal_entry", "updated_at"])

    logger.info(
        "Stock move posted",
        extra={
            "tenant_id": str(tenant_id),
            "stock_move_id": str(move.id),
            "number": move.number,
            "move_type": move.move_type,
            "journal_entry_id": move.journal_entry_id,
        },
    )
    return move


# ------------------------------------------------------------
# Document integrations
# ------------------------------------------------------------


def stock_value(lines) -> Decimal:
    """Standard value of stock lines: sum(qty * product.standard_cost)."""
    total = ZERO
    for line in lines:
        product = line["product"] if isinstance(line, dict) else line.product
        qty = line["quantity"] if isinstance(line, dict) else line.quantity
        if product is None or not product.is_stockable:
            continue
        total += money(quantity(qty) * money(product.standard_cost))
    return money(total)


def receipt_accrual_split(*, tenant_id, moves) -> tuple[Decimal, Decimal]:
    """
    (accrued, unaccrued) value of receipt moves: posted moves at their
    unit_cost snapshot, draft moves at current standard cost.

    accrued:   already credited to GR/IR by a valuation journal, or a draft
               move that will be when it posts
    unaccrued: stock that reached inventory without any valuation entry
    """
    settings = get_inventory_settings(tenant_id=tenant_id)
    values_later = _should_value(tenant_id=tenant_id, settings=settings)
    accrued = ZERO
    unaccrued = ZERO
    for move in moves:
        lines = list(move.lines.select_related("product"))
        if move.is_posted:
            value = _valuation_amounts(move.move_type, lines)[0]
        else:
            value = stock_value(lines)
        if move.journal_entry_id is not None or (not move.is_posted and values_later):
            accrued += value
        else:
            unaccrued += value
    return money(accrued), money(unaccrued)


@transaction.atomic
def receive_into_stock(
    *,
    tenant_id,
    lines,
    date=None,
    memo: str = "",
    source_reference: str = "",
    post: bool = True,
    emit_journal: bool = True,
) -> StockMove | None:
    """
    RECEIPT move for purchased stock products.
    lines: [{"product", "quantity", "location"?}]; location defaults to the
    tenant's default stock location.
    """
    stock_lines = [l for l in lines if l.get("product") is not None and l["product"].is_stockable]
    if not stock_lines:
        return None

    default_location = None
    payload = []
    for line in stock_lines:
        location = line.get("location")
        if location is None:
            default_location = default_location or get_default_stock_location(tenant_id=tenant_id)
            location = default_location
        payload.append({"product": line["product"], "location": location, "quantity": line["quantity"]})

    move = create_stock_move(
        tenant_id=tenant_id,
        move_type=MoveType.RECEIPT,
        lines=payload,
        date=date,
        memo=memo,
        source_reference=source_reference,
    )
    if post:
        move = post_stock_move(tenant_id=tenant_id, stock_move_id=move.id, emit_journal=emit_journal)
    return move


@transaction.atomic
def issue_from_stock(
    *,
    tenant_id,
    lines,
    date=None,
    memo: str = "",
    source_reference: str = "",
    emit_journal: bool = False,
) -> StockMove | None:
    """ISSUE move for sold stock products, from the default stock location."""
    stock_lines = [l for l in lines if l.get("product") is not None and l["product"].is_stockable]
    if not stock_lines:
        return None

    location = get_default_stock_location(tenant_id=tenant_id)
    move = create_stock_move(
        tenant_id=tenant_id,
        move_type=MoveType.ISSUE,
        lines=[{"product": l["product"], "location": location, "quantity": l["quantity"]} for l in stock_lines],
        date=date,
        memo=memo,
        source_reference=source_reference,
    )
    return post_stock_move(tenant_id=tenant_id, stock_move_id=move.id, emit_journal=emit_journal)


# ------------------------------------------------------------
# Reads
# ------------------------------------------------------------


def get_stock_move(*, tenant_id, stock_move_id) -> StockMove:
    require_tenant_id(tenant_id)
    try:
        return StockMove.objects.prefetch_related("lines__product").get(id=stock_move_id, tenant_id=tenant_id)
    except (StockMove.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Stock move not found") from exc


def get_stock_balance(*, tenant_id, product_id, location_id=None) -> Decimal:
    """On-hand at one location, or across all locations when location_id is None."""
    require_tenant_id(tenant_id)
    qs = StockBalance.objects.filter(tenant_id=tenant_id, product_id=product_id)
    if location_id is not None:
        qs = qs.filter(location_id=location_id)
    return quantity(qs.aggregate(total=Sum("quantity_on_hand"))["total"] or QTY_ZERO)


def list_stock_balances(*, tenant_id, product_id=None, location_id=None, include_zero: bool = False):
    require_tenant_id(tenant_id)
    qs = StockBalance.objects.select_related("product", "location__warehouse").filter(tenant_id=tenant_id)
    if product_id is not None:
        qs = qs.filter(product_id=product_id)
    if location_id is not None:
        qs = qs.filter(location_id=location_id)
    if not include_zero:
        qs = qs.exclude(quantity_on_hand=0)
    return qs.order_by("product__sku", "location__code")
