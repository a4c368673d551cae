"""Cart service layer.

Every mutation persists immediately and is scoped to one user, so no lock
is shared between shoppers. Quantities are clamped to the product's live
stock (and the configured per-line ceiling); when a clamp lowers what the
caller asked for, the returned ``CartChange`` says so.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

from django.db import transaction

from glowcart import conf
from glowcart.catalog.pricing import line_total, sum_lines
from glowcart.catalog.services import coerce_product_id, get_product
from glowcart.exceptions import InvalidQuantity, OutOfStock, ProductNotFound, StoreError

from .models import CartItem

logger = logging.getLogger(__name__)


class CartChange(NamedTuple):
    """Outcome of a cart mutation."""

    product_id: object
    requested: int
    quantity: int
    available: int
    clamped: bool

    @property
    def removed(self):
        return self.quantity == 0

    def as_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "requested": self.requested,
            "quantity": self.quantity,
            "available": self.available,
            "clamped": self.clamped,
        }


class CartLine(NamedTuple):
    """A cart line joined with the product's live name, price and stock."""

    product_id: object
    name: str
    unit_price: Decimal
    quantity: int
    stock_quantity: int
    line_total: Decimal

    def as_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "stock_quantity": self.stock_quantity,
            "line_total": str(self.line_total),
        }


class CartView(NamedTuple):
    """Read view of a cart priced at the moment it was built."""

    lines: list
    total: Decimal

    @property
    def item_count(self):
        return sum(line.quantity for line in self.lines)

    def as_dict(self) -> dict:
        return {
            "lines": [line.as_dict() for line in self.lines],
            "total": str(self.total),
            "item_count": self.item_count,
            "currency": conf.get_setting("CURRENCY"),
        }


class MergeResult(NamedTuple):
    """Per-product outcome of folding a guest cart into a user's cart."""

    product_id: object
    change: CartChange | None
    error: StoreError | None

    def as_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "change": self.change.as_dict() if self.change else None,
            "error": self.error.as_dict() if self.error else None,
        }


def validate_quantity(quantity, allow_zero: bool = False) -> int:
    """Check a requested quantity is an integer above zero (or zero if allowed)."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity)
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidQuantity(quantity)
    return quantity


def clamp_quantity(product, requested: int) -> CartChange:
    """Clamp a requested line quantity to stock and the per-line ceiling."""
    ceiling = min(product.stock_quantity, conf.max_line_quantity())
    quantity = min(requested, ceiling)
    return CartChange(
        product_id=product.pk,
        requested=requested,
        quantity=quantity,
        available=product.stock_quantity,
        clamped=quantity < requested,
    )


def _store(user, product, item, requested: int) -> CartChange:
    change = clamp_quantity(product, requested)

    if change.quantity <= 0:
        if item is not None:
            item.delete()
    elif item is None:
        CartItem.objects.create(user=user, product=product, quantity=change.quantity)
    elif item.quantity != change.quantity:
        item.quantity = change.quantity
        item.save(update_fields=["quantity", "updated_at"])

    if change.clamped:
        logger.warning(
            "Cart line clamped for user %s product %s: requested %s, stored %s",
            user.pk, product.pk, requested, change.quantity,
        )
    return change


def _locked_item(user, product):
    return CartItem.objects.select_for_update().filter(user=user, product=product).first()


@transaction.atomic
def add_item(user, product_id, quantity: int) -> CartChange:
    """Add units of a product to the user's cart.

    Quantity is summed with any existing line, then clamped to the product's
    current stock.

    Raises:
        InvalidQuantity: quantity is not a positive integer
        ProductNotFound: product id does not resolve
        OutOfStock: product has no stock right now
    """
    validate_quantity(quantity)
    product = get_product(product_id)
    if product.stock_quantity == 0:
        raise OutOfStock(product.pk)

    item = _locked_item(user, product)
    current = item.quantity if item else 0
    return _store(user, product, item, current + quantity)


@transaction.atomic
def set_quantity(user, product_id, quantity: int) -> CartChange:
    """Set the absolute quantity of a cart line; zero removes it.

    Raises:
        InvalidQuantity: quantity is negative or not an integer
        ProductNotFound: product id does not resolve
        OutOfStock: product has no stock right now
    """
    validate_quantity(quantity, allow_zero=True)
    product = get_product(product_id)

    if quantity == 0:
        remove_item(user, product.pk)
        return CartChange(product.pk, 0, 0, product.stock_quantity, False)

    if product.stock_quantity == 0:
        raise OutOfStock(product.pk)

    return _store(user, product, _locked_item(user, product), quantity)


def remove_item(user, product_id) -> bool:
    """Remove a line from the cart. Removing a missing line is a no-op.

    Returns:
        True if a line was deleted
    """
    try:
        pk = coerce_product_id(product_id)
    except ProductNotFound:
        return False
    deleted, _ = CartItem.objects.filter(user=user, product_id=pk).delete()
    return bool(deleted)


def _guest_pairs(guest_items):
    if hasattr(guest_items, "items"):
        guest_items = guest_items.items()

    grouped = {}
    for product_id, quantity in guest_items:
        key = str(product_id).lower()
        grouped.setdefault(key, (product_id, []))[1].append(quantity)
    return [grouped[key] for key in sorted(grouped)]


@transaction.atomic
def merge_guest_cart(user, guest_items) -> list:
    """Fold an anonymous visitor's cart into the user's cart at sign-in.

    Each guest line goes through ``add_item``, so quantities are summed with
    the user's existing line and clamped to stock. Lines are merged in
    ascending product id order. A line that fails (unknown product, no stock,
    bad quantity) is reported and skipped; it does not stop the merge.

    Args:
        user: The signed-in user
        guest_items: Mapping or pairs of (product_id, quantity)

    Returns:
        List of MergeResult, one per distinct guest product
    """
    results = []
    for product_id, quantities in _guest_pairs(guest_items):
        try:
            quantity = sum(validate_quantity(q) for q in quantities)
            change = add_item(user, product_id, quantity)
        except StoreError as e:
            logger.info("Guest cart line %s skipped for user %s: %s", product_id, user.pk, e.code)
            results.append(MergeResult(product_id, None, e))
        else:
            results.append(MergeResult(change.product_id, change, None))

    logger.info("Merged %s guest cart line(s) for user %s", len(results), user.pk)
    return results


def cart_items(user):
    """Queryset of the user's cart lines with products joined."""
    return CartItem.objects.filter(user=user).select_related("product").order_by("created_at", "id")


def build_cart_view(pairs) -> CartView:
    """Price (product, quantity) pairs at the products' current prices."""
    lines = [
        CartLine(
            product_id=product.pk,
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
            stock_quantity=product.stock_quantity,
            line_total=line_total(product.price, quantity),
        )
        for product, quantity in pairs
    ]
    total = sum_lines((line.unit_price, line.quantity) for line in lines)
    return CartView(lines=lines, total=total)


def list_cart(user) -> CartView:
    """The user's cart joined with live product name, price and stock.

    Nothing here is stored; totals always reflect current prices.
    """
    return build_cart_view((item.product, item.quantity) for item in cart_items(user))


def clear_cart(user, product_ids=None) -> int:
    """Delete the user's cart lines, optionally only for the given products."""
    qs = CartItem.objects.filter(user=user)
    if product_ids is not None:
        qs = qs.filter(product_id__in=list(product_ids))
    deleted, _ = qs.delete()
    return deleted
