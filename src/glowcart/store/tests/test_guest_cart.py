"""Tests for the anonymous session cart and the sign-in merge."""

import json

from glowcart.store.models import CartItem


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


class TestAnonymousCart:
    def test_add_and_list(self, client, serum):
        response = post_json(client, "/shop/cart/items/", {"product_id": str(serum.pk), "quantity": 2})
        assert response.status_code == 200

        cart = client.get("/shop/cart/").json()
        assert cart["item_count"] == 2
        assert cart["total"] == "80.00"
        assert not CartItem.objects.exists()

    def test_clamps_like_the_persisted_cart(self, client, cleanser):
        response = post_json(client, "/shop/cart/items/", {"product_id": str(cleanser.pk), "quantity": 9})

        change = response.json()["change"]
        assert change["clamped"] is True
        assert change["quantity"] == 5

    def test_set_and_remove(self, client, serum):
        post_json(client, "/shop/cart/items/", {"product_id": str(serum.pk), "quantity": 2})

        response = client.put(
            f"/shop/cart/items/{serum.pk}/",
            data=json.dumps({"quantity": 4}),
            content_type="application/json",
        )
        assert response.json()["cart"]["item_count"] == 4

        response = client.delete(f"/shop/cart/items/{serum.pk}/")
        assert response.json()["removed"] is True
        assert response.json()["cart"]["lines"] == []

    def test_out_of_stock(self, client, make_product):
        sold_out = make_product(name="Sold Out", stock_quantity=0)
        response = post_json(client, "/shop/cart/items/", {"product_id": str(sold_out.pk)})

        assert response.status_code == 409
        assert response.json()["error"] == "out_of_stock"


class TestMergeOnSignIn:
    def test_session_cart_merges_into_user_cart(self, client, customer, serum, cleanser):
        from glowcart.store.services import add_item

        add_item(customer, serum.pk, 1)
        post_json(client, "/shop/cart/items/", {"product_id": str(serum.pk), "quantity": 2})
        post_json(client, "/shop/cart/items/", {"product_id": str(cleanser.pk), "quantity": 1})

        assert client.login(email="shopper@example.com", password="testpass123")

        quantities = dict(CartItem.objects.filter(user=customer).values_list("product__name", "quantity"))
        assert quantities == {"Vitamin C Serum": 3, "Foaming Cleanser": 1}
        assert "cart" not in client.session

    def test_clamped_merge_leaves_a_notice(self, client, customer, cleanser):
        from glowcart.store.services import add_item

        add_item(customer, cleanser.pk, 4)
        post_json(client, "/shop/cart/items/", {"product_id": str(cleanser.pk), "quantity": 3})

        client.login(email="shopper@example.com", password="testpass123")
        cart = client.get("/shop/cart/").json()

        assert cart["item_count"] == 5
        assert cart["merge_notices"][0]["change"]["clamped"] is True

    def test_login_without_guest_cart(self, client, customer):
        assert client.login(email="shopper@example.com", password="testpass123")
        assert not CartItem.objects.filter(user=customer).exists()


class TestCartContext:
    def test_anonymous_count(self, rf, serum):
        from django.contrib.auth.models import AnonymousUser
        from django.contrib.sessions.backends.db import SessionStore

        from glowcart.store.context_processors import cart_context
        from glowcart.store.guest import SessionCart

        request = rf.get("/")
        request.user = AnonymousUser()
        request.session = SessionStore()
        SessionCart(request.session).add(serum.pk, 3)

        assert cart_context(request) == {"cart_count": 3}

    def test_user_count(self, rf, customer, serum, cleanser):
        from glowcart.store.context_processors import cart_context
        from glowcart.store.services import add_item

        add_item(customer, serum.pk, 2)
        add_item(customer, cleanser.pk, 1)
        request = rf.get("/")
        request.user = customer

        assert cart_context(request) == {"cart_count": 3}
