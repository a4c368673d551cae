"""Catalog service layer.

The catalog is the system of record for price and stock. Other apps read
products through ``get_product`` and change stock only through
``decrement_stock`` / ``increment_stock``, which are single conditional
UPDATE statements so concurrent checkouts cannot oversell a product.
"""

import logging
import uuid

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, ProtectedError
from django.utils import timezone

from glowcart.core.permissions import require_admin
from glowcart.exceptions import InvalidQuantity, ProductInUse, ProductNotFound, StockConflict

from .models import Product

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name",
    "description",
    "benefits",
    "ingredients",
    "image_url",
    "price",
    "stock_quantity",
    "category",
    "skin_type",
    "featured",
)


def coerce_product_id(product_id):
    """Parse a product id, raising ProductNotFound when it is malformed."""
    if isinstance(product_id, uuid.UUID):
        return product_id
    try:
        return uuid.UUID(str(product_id))
    except (TypeError, ValueError, AttributeError):
        raise ProductNotFound(product_id)


def _require_positive(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)


def get_product(product_id, *, for_update: bool = False) -> Product:
    """Fetch a product by id.

    Args:
        product_id: UUID or its string form
        for_update: Lock the row until the surrounding transaction ends

    Raises:
        ProductNotFound: id is malformed or no such product exists
    """
    pk = coerce_product_id(product_id)
    qs = Product.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=pk)
    except Product.DoesNotExist:
        raise ProductNotFound(product_id)


def get_products(product_ids) -> dict:
    """Fetch several products at once, keyed by id. Missing ids are absent."""
    pks = [coerce_product_id(pid) for pid in product_ids]
    return Product.objects.in_bulk(pks)


def decrement_stock(product_id, quantity: int) -> int:
    """Atomically remove ``quantity`` units from stock.

    The update only matches while ``stock_quantity >= quantity``, so two
    checkouts racing for the last units cannot both succeed.

    Returns:
        Remaining stock after the decrement

    Raises:
        InvalidQuantity: quantity is not positive
        ProductNotFound: no such product
        StockConflict: current stock is below ``quantity``
    """
    _require_positive(quantity)
    pk = coerce_product_id(product_id)

    updated = Product.objects.filter(pk=pk, stock_quantity__gte=quantity).update(
        stock_quantity=F("stock_quantity") - quantity,
        updated_at=timezone.now(),
    )
    if updated:
        return Product.objects.values_list("stock_quantity", flat=True).get(pk=pk)

    available = Product.objects.filter(pk=pk).values_list("stock_quantity", flat=True).first()
    if available is None:
        raise ProductNotFound(product_id)

    logger.warning(
        "Stock conflict on product %s: requested %s, available %s",
        pk, quantity, available,
    )
    raise StockConflict(pk, requested=quantity, available=available)


def increment_stock(product_id, quantity: int) -> int:
    """Atomically return ``quantity`` units to stock.

    Returns:
        Stock after the increment

    Raises:
        InvalidQuantity: quantity is not positive
        ProductNotFound: no such product
    """
    _require_positive(quantity)
    pk = coerce_product_id(product_id)

    updated = Product.objects.filter(pk=pk).update(
        stock_quantity=F("stock_quantity") + quantity,
        updated_at=timezone.now(),
    )
    if not updated:
        raise ProductNotFound(product_id)
    return Product.objects.values_list("stock_quantity", flat=True).get(pk=pk)


def list_products(category: str = None, skin_type: str = None, featured: bool = None) -> list:
    """List products by exact-match filters, ordered by name."""
    qs = Product.objects.all().order_by("name")
    if category:
        qs = qs.filter(category=category)
    if featured is not None:
        qs = qs.filter(featured=featured)

    products = list(qs)
    if skin_type:
        # JSON containment lookups aren't available on every backend
        products = [p for p in products if skin_type in (p.skin_type or [])]
    return products


@transaction.atomic
def create_product(actor, **fields) -> Product:
    """Create a product (administrators only).

    Raises:
        PermissionDenied: actor is not an administrator
        ValidationError: field values are invalid
    """
    require_admin(actor, "create products")

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown product fields: {', '.join(sorted(unknown))}")

    product = Product(**fields)
    product.full_clean()
    product.save()

    logger.info("Product %s created by %s", product.pk, actor)
    return product


@transaction.atomic
def update_product(actor, product_id, **fields) -> Product:
    """Update editable fields of a product (administrators only).

    Price changes never touch existing order items; they hold their own
    price snapshot.
    """
    require_admin(actor, "update products")

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown product fields: {', '.join(sorted(unknown))}")

    product = get_product(product_id, for_update=True)
    for name, value in fields.items():
        setattr(product, name, value)
    product.full_clean()
    product.save(update_fields=[*fields.keys(), "updated_at"])

    logger.info("Product %s updated by %s: %s", product.pk, actor, sorted(fields))
    return product


@transaction.atomic
def delete_product(actor, product_id) -> None:
    """Delete a product (administrators only).

    Raises:
        ProductInUse: product appears on an existing order
    """
    require_admin(actor, "delete products")

    product = get_product(product_id, for_update=True)
    try:
        product.delete()
    except ProtectedError:
        raise ProductInUse(product.pk)

    logger.info("Product %s deleted by %s", product_id, actor)
