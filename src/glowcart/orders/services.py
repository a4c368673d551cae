"""Order service layer.

``create_order`` turns validated lines into an order header plus items and
takes the ordered units out of stock, all inside one transaction: either the
whole order exists and stock is decremented, or nothing changed.
``transition_order`` moves an order along the status lifecycle and, when an
order is cancelled, returns its units to stock in the same transaction.
"""

import logging
from typing import NamedTuple

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch

from glowcart import conf
from glowcart.catalog.models import Product
from glowcart.catalog.pricing import sum_lines
from glowcart.catalog.services import decrement_stock, increment_stock
from glowcart.core.permissions import is_admin, require_admin
from glowcart.exceptions import ConfirmationRequired, EmptyCart, OrderNotFound, ProductNotFound
from glowcart.store.services import clear_cart

from . import lifecycle
from .models import Order, OrderItem, OrderStatus, OrderStatusEvent
from .validation import normalize_lines, validate_cart

logger = logging.getLogger(__name__)


class CheckoutResult(NamedTuple):
    """A placed order and the stock adjustments accepted on the way."""

    order: Order
    adjustments: list


def _check_shipping_address(shipping_address):
    if not isinstance(shipping_address, dict) or not shipping_address:
        raise ValidationError({"shipping_address": ["Shipping address must be a non-empty object"]})


@transaction.atomic
def create_order(user, lines, shipping_address) -> Order:
    """Create an order from validated lines.

    Unit prices are read from the catalog now and frozen on the items.
    Each product's stock is decremented with a conditional update; if any
    product no longer has enough stock the whole order is rolled back.

    Args:
        user: The customer placing the order
        lines: (product_id, quantity) pairs, typically ``ValidationResult.lines``
        shipping_address: Address mapping stored as given

    Returns:
        The new Order, status pending

    Raises:
        EmptyCart: no lines
        InvalidQuantity: a quantity is not positive
        ProductNotFound: a product no longer exists
        StockConflict: stock ran out after validation; nothing was written
    """
    _check_shipping_address(shipping_address)
    lines = normalize_lines(lines)
    if not lines:
        raise EmptyCart()

    # Lock product rows in id order so concurrent checkouts queue instead of deadlocking
    products = {
        p.pk: p
        for p in Product.objects.select_for_update().filter(pk__in=[line.product_id for line in lines]).order_by("pk")
    }

    for line in lines:
        if line.product_id not in products:
            raise ProductNotFound(line.product_id)
        decrement_stock(line.product_id, line.quantity)

    total = sum_lines((products[line.product_id].price, line.quantity) for line in lines)
    order = Order.objects.create(
        user=user,
        status=lifecycle.INITIAL_STATUS,
        total_amount=total,
        shipping_address=shipping_address,
    )
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            product=products[line.product_id],
            quantity=line.quantity,
            price=products[line.product_id].price,
        )
        for line in lines
    ])
    OrderStatusEvent.objects.create(
        order=order,
        from_status="",
        to_status=order.status,
        actor=user,
        note="Order placed",
    )

    clear_cart(user, [line.product_id for line in lines])

    logger.info(
        "Order %s created for user %s: %s line(s), total %s",
        order.pk, user.pk, len(lines), total,
    )
    return order


def checkout(user, shipping_address, confirm: bool = False) -> CheckoutResult:
    """Validate the user's cart and place the order.

    When validation had to drop or clamp lines, the order is only placed if
    the caller confirms (``confirm=True``) or ``AUTO_CLAMP_CHECKOUT`` is on.

    Raises:
        EmptyCart: nothing in the cart can be ordered
        ConfirmationRequired: lines were adjusted and not yet confirmed
        StockConflict: stock ran out between validation and commit
    """
    _check_shipping_address(shipping_address)
    validation = validate_cart(user)

    if validation.adjusted and not (confirm or conf.auto_clamp_checkout()):
        raise ConfirmationRequired(validation)

    order = create_order(user, validation.lines, shipping_address)
    return CheckoutResult(order=order, adjustments=validation.adjustments)


@transaction.atomic
def transition_order(actor, order_id, new_status, note: str = "") -> Order:
    """Move an order to ``new_status`` (administrators only).

    Cancelling returns each item's quantity to stock in the same
    transaction as the status change.

    Raises:
        PermissionDenied: actor is not an administrator
        OrderNotFound: no such order
        InvalidTransition: the lifecycle does not allow this step
    """
    require_admin(actor, "change order status")

    try:
        order = Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFound(order_id)

    old_status = order.status
    lifecycle.check_transition(old_status, new_status)

    if new_status in lifecycle.RESTOCKING_STATUSES:
        for item in order.items.all():
            increment_stock(item.product_id, item.quantity)

    order.status = new_status
    order.save(update_fields=["status", "updated_at"])

    OrderStatusEvent.objects.create(
        order=order,
        from_status=old_status,
        to_status=new_status,
        actor=actor,
        note=note or "",
    )

    logger.info("Order %s moved %s -> %s by %s", order.pk, old_status, new_status, actor)
    return order


def cancel_order(actor, order_id, note: str = "") -> Order:
    """Cancel a pending or processing order and restock its items."""
    return transition_order(actor, order_id, OrderStatus.CANCELLED, note=note)


def _with_items(qs):
    return qs.select_related("user").prefetch_related(
        Prefetch("items", queryset=OrderItem.objects.select_related("product"))
    )


def get_order(user, order_id) -> Order:
    """Fetch an order visible to ``user`` (its owner or an administrator)."""
    qs = _with_items(Order.objects.all())
    if not is_admin(user):
        qs = qs.filter(user=user)
    try:
        return qs.get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFound(order_id)


def list_user_orders(user):
    """The user's own orders, newest first."""
    return _with_items(Order.objects.filter(user=user)).order_by("-created_at")


def list_orders(actor, status: str = None):
    """All orders for the admin board, optionally filtered by status."""
    require_admin(actor, "view all orders")
    qs = Order.objects.all()
    if status:
        qs = qs.filter(status=status)
    return _with_items(qs).order_by("-created_at")
