"""Cart JSON endpoints.

Signed-in shoppers work on their persisted cart; anonymous visitors work on
the session cart, which is merged at sign-in.
"""

from django.http import JsonResponse

from glowcart.core.api import ApiView, BadRequest, json_body

from . import services
from .guest import SessionCart


class CartApiView(ApiView):
    def cart_view(self, request):
        if request.user.is_authenticated:
            return services.list_cart(request.user)
        return SessionCart(request.session).view()


class CartView(CartApiView):
    """GET returns the cart priced at current prices."""

    def get(self, request):
        data = self.cart_view(request).as_dict()
        notices = request.session.pop("cart_merge_notices", None)
        if notices:
            data["merge_notices"] = notices
        return JsonResponse(data)


class CartItemsView(CartApiView):
    """POST adds units of a product: ``{"product_id": ..., "quantity": 1}``."""

    def post(self, request):
        data = json_body(request)
        product_id = data.get("product_id")
        if not product_id:
            raise BadRequest("product_id is required")
        quantity = data.get("quantity", 1)

        if request.user.is_authenticated:
            change = services.add_item(request.user, product_id, quantity)
        else:
            change = SessionCart(request.session).add(product_id, quantity)

        return JsonResponse({"change": change.as_dict(), "cart": self.cart_view(request).as_dict()})


class CartItemView(CartApiView):
    """PUT sets a line's quantity; DELETE removes the line."""

    def put(self, request, product_id):
        data = json_body(request)
        if "quantity" not in data:
            raise BadRequest("quantity is required")

        if request.user.is_authenticated:
            change = services.set_quantity(request.user, product_id, data["quantity"])
        else:
            change = SessionCart(request.session).set(product_id, data["quantity"])

        return JsonResponse({"change": change.as_dict(), "cart": self.cart_view(request).as_dict()})

    def delete(self, request, product_id):
        if request.user.is_authenticated:
            removed = services.remove_item(request.user, product_id)
        else:
            removed = SessionCart(request.session).remove(product_id)

        return JsonResponse({"removed": removed, "cart": self.cart_view(request).as_dict()})
