"""Shared pytest fixtures for glowcart tests."""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model


User = get_user_model()


@pytest.fixture
def customer(db):
    """Create a shopper account."""
    return User.objects.create_user(
        email="shopper@example.com",
        password="testpass123",
        name="Shopper",
    )


@pytest.fixture
def other_customer(db):
    """Create a second shopper account."""
    return User.objects.create_user(
        email="other@example.com",
        password="testpass123",
        name="Other Shopper",
    )


@pytest.fixture
def admin_user(db):
    """Create a shop administrator."""
    return User.objects.create_user(
        email="admin@example.com",
        password="testpass123",
        name="Admin",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def make_product(db):
    """Factory for catalog products."""
    from glowcart.catalog.models import Product

    def _make(name="Hydrating Serum", price="25.00", stock_quantity=10, category="serum", **extra):
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            stock_quantity=stock_quantity,
            category=category,
            **extra,
        )

    return _make


@pytest.fixture
def serum(make_product):
    return make_product(name="Vitamin C Serum", price="40.00", stock_quantity=10, category="serum")


@pytest.fixture
def cleanser(make_product):
    return make_product(name="Foaming Cleanser", price="15.50", stock_quantity=5, category="cleanser")


@pytest.fixture
def shipping_address():
    return {
        "name": "Shopper",
        "line1": "12 Rose Street",
        "city": "Portland",
        "postal_code": "97201",
        "country": "US",
    }
