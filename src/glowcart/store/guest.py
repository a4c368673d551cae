"""Session-backed cart for anonymous visitors.

The guest cart follows the same quantity and stock rules as the persisted
cart. It lives in the session as ``{product_id: quantity}`` and is folded into
the user's cart by ``merge_into_user`` when the visitor signs in.
"""

import logging

from glowcart import conf
from glowcart.catalog.services import coerce_product_id, get_product, get_products
from glowcart.exceptions import OutOfStock, ProductNotFound

from . import services
from .services import CartChange

logger = logging.getLogger(__name__)


class SessionCart:
    """Guest cart stored in ``request.session``."""

    def __init__(self, session):
        self.session = session
        self.key = conf.guest_cart_session_key()

    def items(self) -> dict:
        return dict(self.session.get(self.key) or {})

    def _save(self, items):
        self.session[self.key] = items
        self.session.modified = True

    def add(self, product_id, quantity: int) -> CartChange:
        services.validate_quantity(quantity)
        product = get_product(product_id)
        if product.stock_quantity == 0:
            raise OutOfStock(product.pk)

        items = self.items()
        current = int(items.get(str(product.pk), 0))
        return self._store(items, product, current + quantity)

    def set(self, product_id, quantity: int) -> CartChange:
        services.validate_quantity(quantity, allow_zero=True)
        product = get_product(product_id)

        if quantity == 0:
            self.remove(product.pk)
            return CartChange(product.pk, 0, 0, product.stock_quantity, False)

        if product.stock_quantity == 0:
            raise OutOfStock(product.pk)

        return self._store(self.items(), product, quantity)

    def remove(self, product_id) -> bool:
        try:
            key = str(coerce_product_id(product_id))
        except ProductNotFound:
            return False
        items = self.items()
        if key not in items:
            return False
        del items[key]
        self._save(items)
        return True

    def _store(self, items, product, requested: int) -> CartChange:
        change = services.clamp_quantity(product, requested)
        key = str(product.pk)
        if change.quantity <= 0:
            items.pop(key, None)
        else:
            items[key] = change.quantity
        self._save(items)
        return change

    def view(self) -> services.CartView:
        """Price the guest cart at current prices, skipping vanished products."""
        items = self.items()
        valid = {}
        for key, quantity in items.items():
            try:
                valid[coerce_product_id(key)] = quantity
            except ProductNotFound:
                continue
        products = get_products(valid)
        pairs = [(products[pk], quantity) for pk, quantity in valid.items() if pk in products]
        return services.build_cart_view(pairs)

    def count(self) -> int:
        return sum(int(q) for q in self.items().values())

    def clear(self):
        if self.key in self.session:
            del self.session[self.key]
            self.session.modified = True


def merge_into_user(session, user) -> list:
    """Merge the session's guest cart into ``user``'s cart and discard it."""
    cart = SessionCart(session)
    items = cart.items()
    if not items:
        return []

    results = services.merge_guest_cart(user, items)
    cart.clear()
    return results
