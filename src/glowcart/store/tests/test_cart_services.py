"""Tests for the cart service layer."""

from decimal import Decimal
import uuid

import pytest

from glowcart.exceptions import InvalidQuantity, OutOfStock, ProductNotFound
from glowcart.store import services
from glowcart.store.models import CartItem


def stored_quantity(user, product):
    item = CartItem.objects.filter(user=user, product=product).first()
    return item.quantity if item else 0


class TestAddItem:
    def test_creates_line(self, customer, serum):
        change = services.add_item(customer, serum.pk, 2)

        assert change.quantity == 2
        assert not change.clamped
        assert stored_quantity(customer, serum) == 2

    def test_sums_with_existing_line(self, customer, serum):
        services.add_item(customer, serum.pk, 2)
        change = services.add_item(customer, serum.pk, 3)

        assert change.requested == 5
        assert stored_quantity(customer, serum) == 5
        assert CartItem.objects.filter(user=customer).count() == 1

    def test_clamps_to_stock_and_reports_it(self, customer, cleanser):
        change = services.add_item(customer, cleanser.pk, 8)

        assert change.clamped
        assert change.requested == 8
        assert change.quantity == 5
        assert change.available == 5
        assert stored_quantity(customer, cleanser) == 5

    def test_repeated_adds_never_exceed_stock(self, customer, cleanser):
        for _ in range(4):
            services.add_item(customer, cleanser.pk, 2)
            assert stored_quantity(customer, cleanser) <= cleanser.stock_quantity

    def test_line_ceiling_from_settings(self, customer, serum, settings):
        settings.GLOWCART = {**settings.GLOWCART, "MAX_LINE_QUANTITY": 3}

        change = services.add_item(customer, serum.pk, 5)

        assert change.clamped
        assert stored_quantity(customer, serum) == 3

    @pytest.mark.parametrize("quantity", [0, -2, "3", 1.0, None])
    def test_invalid_quantity(self, customer, serum, quantity):
        with pytest.raises(InvalidQuantity):
            services.add_item(customer, serum.pk, quantity)
        assert stored_quantity(customer, serum) == 0

    def test_unknown_product(self, customer):
        with pytest.raises(ProductNotFound):
            services.add_item(customer, uuid.uuid4(), 1)

    def test_out_of_stock(self, customer, make_product):
        sold_out = make_product(name="Sold Out Mask", category="mask", stock_quantity=0)
        with pytest.raises(OutOfStock):
            services.add_item(customer, sold_out.pk, 1)
        assert not CartItem.objects.filter(user=customer).exists()

    def test_stale_line_shrinks_to_current_stock(self, customer, serum):
        services.add_item(customer, serum.pk, 8)
        serum.stock_quantity = 3
        serum.save()

        change = services.add_item(customer, serum.pk, 1)

        assert change.clamped
        assert stored_quantity(customer, serum) == 3


class TestSetQuantity:
    def test_sets_absolute_quantity(self, customer, serum):
        services.add_item(customer, serum.pk, 5)
        change = services.set_quantity(customer, serum.pk, 2)

        assert change.quantity == 2
        assert stored_quantity(customer, serum) == 2

    def test_creates_line_when_missing(self, customer, serum):
        services.set_quantity(customer, serum.pk, 4)
        assert stored_quantity(customer, serum) == 4

    def test_zero_removes(self, customer, serum):
        services.add_item(customer, serum.pk, 5)
        change = services.set_quantity(customer, serum.pk, 0)

        assert change.removed
        assert not CartItem.objects.filter(user=customer).exists()

    def test_clamps(self, customer, cleanser):
        change = services.set_quantity(customer, cleanser.pk, 9)
        assert change.clamped
        assert stored_quantity(customer, cleanser) == 5

    def test_negative(self, customer, serum):
        with pytest.raises(InvalidQuantity):
            services.set_quantity(customer, serum.pk, -1)

    def test_out_of_stock(self, customer, serum):
        services.add_item(customer, serum.pk, 2)
        serum.stock_quantity = 0
        serum.save()

        with pytest.raises(OutOfStock):
            services.set_quantity(customer, serum.pk, 1)


class TestRemoveItem:
    def test_removes(self, customer, serum):
        services.add_item(customer, serum.pk, 1)
        assert services.remove_item(customer, serum.pk) is True
        assert not CartItem.objects.filter(user=customer).exists()

    def test_missing_line_is_noop(self, customer, serum):
        assert services.remove_item(customer, serum.pk) is False
        assert services.remove_item(customer, "not-a-uuid") is False


class TestCartIsolation:
    def test_users_do_not_share_lines(self, customer, other_customer, serum):
        services.add_item(customer, serum.pk, 2)
        services.add_item(other_customer, serum.pk, 3)
        services.remove_item(other_customer, serum.pk)

        assert stored_quantity(customer, serum) == 2
        assert stored_quantity(other_customer, serum) == 0


class TestListCart:
    def test_joins_live_product_data(self, customer, serum, cleanser):
        services.add_item(customer, serum.pk, 2)
        services.add_item(customer, cleanser.pk, 1)

        view = services.list_cart(customer)

        assert [line.name for line in view.lines] == ["Vitamin C Serum", "Foaming Cleanser"]
        assert view.total == Decimal("95.50")
        assert view.item_count == 3

    def test_total_follows_price_changes(self, customer, serum):
        services.add_item(customer, serum.pk, 2)
        serum.price = Decimal("35.00")
        serum.save()

        view = services.list_cart(customer)

        assert view.lines[0].unit_price == Decimal("35.00")
        assert view.total == Decimal("70.00")

    def test_total_is_sum_of_price_times_quantity(self, customer, make_product):
        products = [
            make_product(name=f"Product {i}", price=price, stock_quantity=10)
            for i, price in enumerate(["0.10", "0.20", "19.99", "3.33"])
        ]
        for i, product in enumerate(products, start=1):
            services.add_item(customer, product.pk, i)

        view = services.list_cart(customer)

        expected = sum(p.price * i for i, p in enumerate(products, start=1))
        assert view.total == expected

    def test_empty(self, customer):
        view = services.list_cart(customer)
        assert view.lines == []
        assert view.total == Decimal("0.00")


class TestMergeGuestCart:
    def test_sums_with_existing_lines(self, customer, serum, cleanser):
        services.add_item(customer, serum.pk, 1)

        results = services.merge_guest_cart(customer, {str(serum.pk): 2, str(cleanser.pk): 1})

        assert all(r.error is None for r in results)
        assert stored_quantity(customer, serum) == 3
        assert stored_quantity(customer, cleanser) == 1

    def test_merges_in_ascending_product_id_order(self, customer, make_product):
        products = [make_product(name=f"P{i}") for i in range(4)]
        guest = {str(p.pk): 1 for p in reversed(products)}

        results = services.merge_guest_cart(customer, guest)

        assert [r.product_id for r in results] == sorted(p.pk for p in products)

    def test_clamps_merged_quantity(self, customer, cleanser):
        services.add_item(customer, cleanser.pk, 4)

        results = services.merge_guest_cart(customer, {str(cleanser.pk): 3})

        assert results[0].change.clamped
        assert stored_quantity(customer, cleanser) == 5

    def test_failed_lines_are_reported_not_fatal(self, customer, serum, make_product):
        sold_out = make_product(name="Sold Out", stock_quantity=0)
        missing = uuid.uuid4()

        results = services.merge_guest_cart(
            customer, {str(serum.pk): 1, str(sold_out.pk): 1, str(missing): 1}
        )

        errors = {str(r.product_id): r.error.code for r in results if r.error}
        assert errors == {str(sold_out.pk): "out_of_stock", str(missing): "product_not_found"}
        assert stored_quantity(customer, serum) == 1

    def test_accepts_pairs_and_combines_duplicates(self, customer, serum):
        services.merge_guest_cart(customer, [(serum.pk, 1), (str(serum.pk), 2)])
        assert stored_quantity(customer, serum) == 3

    def test_bad_duplicate_quantities_are_reported_not_fatal(self, customer, serum, cleanser):
        results = services.merge_guest_cart(
            customer, [(serum.pk, "2"), (serum.pk, "1"), (cleanser.pk, 1)]
        )

        errors = {r.product_id: r.error.code for r in results if r.error}
        assert errors == {serum.pk: "invalid_quantity"}
        assert stored_quantity(customer, serum) == 0
        assert stored_quantity(customer, cleanser) == 1
