# inventory/services/catalog_service.py

"""
PRODUCT CATALOG SERVICE

- SKU unique per tenant (Conflict)
- product_type is a closed enum (STOCK / SERVICE)
- prices and standard cost are non-negative money values

Changing standard_cost affects only FUTURE stock postings; posted lines
keep their unit_cost snapshot.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import Q

from core.errors import ConflictError, InvalidInputError, NotFoundError
from core.money import money
from inventory.models import Product, ProductType
from tenants.context import require_tenant_id

logger = logging.getLogger("inventory")

_UNSET = object()


def _non_negative(value, *, label: str):
    amt = money(value)
    if amt < 0:
        raise InvalidInputError(f"{label} cannot be negative")
    return amt


def _product_type(value) -> str:
    pt = str(value or ProductType.STOCK).strip().upper()
    if pt not in ProductType.values:
        raise InvalidInputError(f"product_type must be one of: {', '.join(ProductType.values)}")
    return pt


def get_product(*, tenant_id, product_id, for_update: bool = False) -> Product:
    require_tenant_id(tenant_id)
    qs = Product.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=product_id, tenant_id=tenant_id)
    except (Product.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Product not found") from exc


def list_products(*, tenant_id, search: str | None = None, include_inactive: bool = True):
    require_tenant_id(tenant_id)
    qs = Product.objects.filter(tenant_id=tenant_id)
    if search:
        qs = qs.filter(Q(sku__icontains=search) | Q(name__icontains=search))
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("-is_active", "-created_at")


@transaction.atomic
def create_product(
    *,
    tenant_id,
    sku: str,
    name: str,
    product_type: str = ProductType.STOCK,
    standard_cost=0,
    sale_price=0,
    description: str = "",
    unit_of_measure: str = "unit",
) -> Product:
    require_tenant_id(tenant_id)

    sku = (sku or "").strip()
    name = (name or "").strip()
    if not sku:
        raise InvalidInputError("SKU is required")
    if not name:
        raise InvalidInputError("Product name is required")

    if Product.objects.filter(tenant_id=tenant_id, sku=sku).exists():
        raise ConflictError(f"Product with SKU {sku} already exists")

    try:
        with transaction.atomic():
            product = Product.objects.create(
                tenant_id=tenant_id,
                sku=sku,
                name=name,
                description=description or "",
                product_type=_product_type(product_type),
                unit_of_measure=(unit_of_measure or "unit").strip(),
                standard_cost=_non_negative(standard_cost, label="standard_cost"),
                sale_price=_non_negative(sale_price, label="sale_price"),
            )
    except IntegrityError as exc:
        raise ConflictError(f"Product with SKU {sku} already exists") from exc

    logger.info(
        "Product created",
        extra={"tenant_id": str(tenant_id), "product_id": str(product.id), "sku": sku},
    )
    return product


@transaction.atomic
def update_product(
    *,
    tenant_id,
    product_id,
    name=_UNSET,
    description=_UNSET,
    standard_cost=_UNSET,
    sale_price=_UNSET,
    is_active=_UNSET,
) -> Product:
    product = get_product(tenant_id=tenant_id, product_id=product_id, for_update=True)

    if name is not _UNSET:
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Product name is required")
        product.name = name
    if description is not _UNSET:
        product.description = description or ""
    if standard_cost is not _UNSET:
        product.standard_cost = _non_negative(standard_cost, label="standard_cost")
    if sale_price is not _UNSET:
        product.sale_price = _non_negative(sale_price, label="sale_price")
    if is_active is not _UNSET:
        product.is_active = bool(is_active)

    product.save()

    logger.info(
        "Product updated",
        extra={"tenant_id": str(tenant_id), "product_id": str(product.id), "sku": product.sku},
    )
    return product


def resolve_line_products(*, tenant_id, lines) -> list[dict]:
    """
    Replace `product_id` on raw document lines with the tenant's Product.
    Lines without a product (free-text service lines) pass through.
    """
    require_tenant_id(tenant_id)
    out = []
    for idx, raw in enumerate(lines or [], start=1):
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Line {idx} must be an object")
        line = dict(raw)
        product_id = line.pop("product_id", None)
        if line.get("product") is None and product_id not in (None, ""):
            try:
                line["product"] = Product.objects.get(id=product_id, tenant_id=tenant_id)
            except (Product.DoesNotExist, ValueError, TypeError) as exc:
                raise NotFoundError(f"Line {idx}: product not found") from exc
        elif line.get("product") is not None and str(line["product"].tenant_id) != str(tenant_id):
            raise NotFoundError(f"Line {idx}: product not found")
        out.append(line)
    return out
