"""Fixtures for order tests."""

import pytest

from glowcart.orders.services import create_order
from glowcart.store.services import add_item


@pytest.fixture
def pending_order(customer, serum, cleanser, shipping_address):
    """A pending order for 2 serums and 1 cleanser."""
    return create_order(customer, [(serum.pk, 2), (cleanser.pk, 1)], shipping_address)


@pytest.fixture
def filled_cart(customer, serum, cleanser):
    """Customer cart holding 2 serums and 1 cleanser."""
    add_item(customer, serum.pk, 2)
    add_item(customer, cleanser.pk, 1)
    return customer
