"""Tests for order assembly and the checkout policy."""

import threading
import uuid
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import DatabaseError, connection

from glowcart.catalog.models import Product
from glowcart.exceptions import ConfirmationRequired, EmptyCart, ProductNotFound, StockConflict
from glowcart.orders.models import Order, OrderItem, OrderStatus, OrderStatusEvent
from glowcart.orders.services import checkout, create_order
from glowcart.orders.validation import UNAVAILABLE, validate_cart
from glowcart.store.models import CartItem
from glowcart.store.services import add_item


def stock_of(product):
    return Product.objects.values_list("stock_quantity", flat=True).get(pk=product.pk)


class TestCreateOrder:
    def test_writes_header_and_items(self, customer, serum, cleanser, shipping_address):
        order = create_order(customer, [(serum.pk, 2), (cleanser.pk, 1)], shipping_address)

        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("95.50")
        assert order.shipping_address == shipping_address
        items = {item.product_id: item for item in order.items.all()}
        assert items[serum.pk].quantity == 2
        assert items[serum.pk].price == Decimal("40.00")
        assert items[cleanser.pk].price == Decimal("15.50")

    def test_total_matches_items(self, customer, make_product, shipping_address):
        products = [make_product(name=f"P{i}", price=price) for i, price in enumerate(["0.10", "0.20", "19.99"])]
        order = create_order(customer, [(p.pk, 3) for p in products], shipping_address)

        order.refresh_from_db()
        assert order.get_items_total() == order.total_amount == Decimal("60.87")

    def test_decrements_stock(self, customer, serum, cleanser, shipping_address):
        create_order(customer, [(serum.pk, 2), (cleanser.pk, 5)], shipping_address)

        assert stock_of(serum) == 8
        assert stock_of(cleanser) == 0

    def test_clears_ordered_cart_lines(self, filled_cart, serum, cleanser, make_product, shipping_address):
        mask = make_product(name="Mask", category="mask")
        add_item(filled_cart, mask.pk, 1)

        create_order(filled_cart, [(serum.pk, 2), (cleanser.pk, 1)], shipping_address)

        assert list(CartItem.objects.filter(user=filled_cart).values_list("product_id", flat=True)) == [mask.pk]

    def test_records_placement_event(self, pending_order, customer):
        event = pending_order.status_events.get()
        assert event.from_status == ""
        assert event.to_status == OrderStatus.PENDING
        assert event.actor == customer

    def test_no_lines(self, customer, shipping_address):
        with pytest.raises(EmptyCart):
            create_order(customer, [], shipping_address)
        assert not Order.objects.exists()

    def test_requires_shipping_address(self, customer, serum):
        with pytest.raises(ValidationError):
            create_order(customer, [(serum.pk, 1)], None)
        assert stock_of(serum) == 10

    def test_unknown_product_rolls_back(self, customer, serum, shipping_address):
        with pytest.raises(ProductNotFound):
            create_order(customer, [(serum.pk, 1), (uuid.uuid4(), 1)], shipping_address)

        assert not Order.objects.exists()
        assert stock_of(serum) == 10


class TestAllOrNothing:
    def test_stock_conflict_rolls_back_everything(self, filled_cart, serum, cleanser, shipping_address):
        lines = validate_cart(filled_cart).lines
        # Another checkout takes the cleanser after validation
        Product.objects.filter(pk=cleanser.pk).update(stock_quantity=0)

        with pytest.raises(StockConflict) as exc:
            create_order(filled_cart, lines, shipping_address)

        assert exc.value.product_id == cleanser.pk
        assert not Order.objects.exists()
        assert not OrderItem.objects.exists()
        assert not OrderStatusEvent.objects.exists()
        assert stock_of(serum) == 10
        assert CartItem.objects.filter(user=filled_cart).count() == 2

    def test_competing_checkouts_cannot_oversell(
        self, customer, other_customer, make_product, shipping_address
    ):
        product = make_product(name="Last Units", stock_quantity=3)
        add_item(customer, product.pk, 2)
        add_item(other_customer, product.pk, 2)

        # Both validate before either commits
        first = validate_cart(customer)
        second = validate_cart(other_customer)
        assert not first.adjusted and not second.adjusted

        create_order(customer, first.lines, shipping_address)
        with pytest.raises(StockConflict):
            create_order(other_customer, second.lines, shipping_address)

        assert stock_of(product) == 1
        assert Order.objects.count() == 1
        assert Order.objects.get().user == customer
        assert CartItem.objects.filter(user=other_customer).count() == 1



class TestConcurrentCheckout:
    @pytest.mark.django_db(transaction=True)
    def test_parallel_checkouts_never_oversell(
        self, customer, other_customer, make_product, shipping_address
    ):
        product = make_product(name="Last Units", stock_quantity=3)
        add_item(customer, product.pk, 2)
        add_item(other_customer, product.pk, 2)
        plans = [(user, validate_cart(user).lines) for user in (customer, other_customer)]

        barrier = threading.Barrier(len(plans))
        outcomes = []

        def place(user, lines):
            try:
                barrier.wait(timeout=10)
                create_order(user, lines, shipping_address)
            except StockConflict:
                outcomes.append("stock_conflict")
            except DatabaseError:
                # SQLite refuses a write while the other transaction holds the table
                outcomes.append("locked")
            else:
                outcomes.append("ordered")
            finally:
                connection.close()

        threads = [threading.Thread(target=place, args=plan) for plan in plans]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert len(outcomes) == 2
        placed = outcomes.count("ordered")
        assert placed <= 1
        assert set(outcomes) <= {"ordered", "stock_conflict", "locked"}
        assert stock_of(product) == 3 - 2 * placed
        assert Order.objects.count() == placed
        assert OrderItem.objects.count() == placed


class TestPriceSnapshot:
    def test_item_price_survives_catalog_change(self, pending_order, serum):
        serum.price = Decimal("99.00")
        serum.save()

        item = pending_order.items.get(product=serum)
        assert item.price == Decimal("40.00")
        pending_order.refresh_from_db()
        assert pending_order.total_amount == Decimal("95.50")

    def test_items_are_immutable(self, pending_order):
        item = pending_order.items.first()
        item.price = Decimal("1.00")
        with pytest.raises(ValueError):
            item.save()

    def test_header_is_immutable_except_status(self, pending_order):
        pending_order.total_amount = Decimal("1.00")
        with pytest.raises(ValueError):
            pending_order.save()
        with pytest.raises(ValueError):
            pending_order.save(update_fields=["total_amount"])


class TestCheckout:
    def test_places_order_from_cart(self, filled_cart, shipping_address):
        result = checkout(filled_cart, shipping_address)

        assert result.adjustments == []
        assert result.order.total_amount == Decimal("95.50")
        assert not CartItem.objects.filter(user=filled_cart).exists()

    def test_empty_cart(self, customer, shipping_address):
        with pytest.raises(EmptyCart):
            checkout(customer, shipping_address)

    def test_adjustments_need_confirmation(self, customer, make_product, shipping_address):
        p1 = make_product(name="P1", stock_quantity=5)
        p2 = make_product(name="P2", stock_quantity=5)
        add_item(customer, p1.pk, 2)
        add_item(customer, p2.pk, 1)
        Product.objects.filter(pk=p2.pk).update(stock_quantity=0)

        with pytest.raises(ConfirmationRequired) as exc:
            checkout(customer, shipping_address)

        assert exc.value.validation.adjustments[0].kind == UNAVAILABLE
        assert not Order.objects.exists()
        assert stock_of(p1) == 5

    def test_confirmed_checkout_orders_surviving_lines(self, customer, make_product, shipping_address):
        p1 = make_product(name="P1", stock_quantity=5)
        p2 = make_product(name="P2", stock_quantity=5)
        add_item(customer, p1.pk, 2)
        add_item(customer, p2.pk, 1)
        Product.objects.filter(pk=p2.pk).update(stock_quantity=0)

        result = checkout(customer, shipping_address, confirm=True)

        items = list(result.order.items.values_list("product_id", "quantity"))
        assert items == [(p1.pk, 2)]
        assert [a.product_id for a in result.adjustments] == [p2.pk]
        assert stock_of(p1) == 3
        # The unavailable line stays in the cart
        assert list(CartItem.objects.filter(user=customer).values_list("product_id", flat=True)) == [p2.pk]

    def test_auto_clamp_setting(self, customer, serum, shipping_address, settings):
        settings.GLOWCART = {**settings.GLOWCART, "AUTO_CLAMP_CHECKOUT": True}
        add_item(customer, serum.pk, 6)
        Product.objects.filter(pk=serum.pk).update(stock_quantity=4)

        result = checkout(customer, shipping_address)

        assert result.order.items.get().quantity == 4
        assert stock_of(serum) == 0
