"""Checkout-time stock validation.

Validation re-reads stock from the catalog for every line; quantities shown
by an earlier cart listing are never trusted. A line whose product has no
stock is dropped and reported as unavailable; a line asking for more than
is left is clamped and reported as partially available.
"""

import logging
from typing import NamedTuple

from glowcart.catalog.services import coerce_product_id, get_products
from glowcart.exceptions import EmptyCart, InvalidQuantity
from glowcart.store.models import CartItem

logger = logging.getLogger(__name__)

UNAVAILABLE = "unavailable"
PARTIALLY_AVAILABLE = "partially_available"


class CheckoutLine(NamedTuple):
    """A product and the quantity to order."""

    product_id: object
    quantity: int

    def as_dict(self) -> dict:
        return {"product_id": str(self.product_id), "quantity": self.quantity}


class StockAdjustment(NamedTuple):
    """A warning that a line could not be ordered as requested."""

    product_id: object
    name: str
    requested: int
    available: int
    kind: str

    def as_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "requested": self.requested,
            "available": self.available,
            "kind": self.kind,
        }


class ValidationResult(NamedTuple):
    """Lines that can be ordered plus the adjustments made to get there."""

    lines: list
    adjustments: list

    @property
    def adjusted(self):
        return bool(self.adjustments)

    def as_dict(self) -> dict:
        return {
            "lines": [line.as_dict() for line in self.lines],
            "adjustments": [a.as_dict() for a in self.adjustments],
        }


def normalize_lines(lines) -> list:
    """Combine duplicate products and check quantities.

    Returns:
        CheckoutLines in ascending product id order

    Raises:
        InvalidQuantity: a quantity is not a positive integer
        ProductNotFound: a product id is malformed
    """
    totals = {}
    for product_id, quantity in lines:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantity(quantity)
        pk = coerce_product_id(product_id)
        totals[pk] = totals.get(pk, 0) + quantity
    return [CheckoutLine(pk, totals[pk]) for pk in sorted(totals)]


def validate_lines(lines) -> ValidationResult:
    """Check requested quantities against current stock.

    Raises:
        EmptyCart: no line survives validation
    """
    lines = normalize_lines(lines)
    products = get_products(line.product_id for line in lines)

    valid = []
    adjustments = []
    for line in lines:
        product = products.get(line.product_id)
        available = product.stock_quantity if product else 0
        name = product.name if product else ""

        if available <= 0:
            adjustments.append(StockAdjustment(line.product_id, name, line.quantity, 0, UNAVAILABLE))
        elif available < line.quantity:
            adjustments.append(
                StockAdjustment(line.product_id, name, line.quantity, available, PARTIALLY_AVAILABLE)
            )
            valid.append(CheckoutLine(line.product_id, available))
        else:
            valid.append(line)

    if adjustments:
        logger.warning(
            "Checkout validation adjusted %s line(s): %s",
            len(adjustments),
            ", ".join(f"{a.product_id}={a.kind}" for a in adjustments),
        )

    if not valid:
        raise EmptyCart(adjustments)

    return ValidationResult(lines=valid, adjustments=adjustments)


def validate_cart(user) -> ValidationResult:
    """Validate the user's current cart against live stock.

    Raises:
        EmptyCart: the cart is empty or nothing in it is in stock
    """
    snapshot = list(CartItem.objects.filter(user=user).values_list("product_id", "quantity"))
    if not snapshot:
        raise EmptyCart()
    return validate_lines(snapshot)
