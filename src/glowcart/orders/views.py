"""Checkout and order JSON endpoints."""

from django.http import JsonResponse

from glowcart.core.api import ApiView, BadRequest, json_body

from . import services
from .lifecycle import allowed_transitions
from .models import OrderStatus
from .validation import validate_cart


def order_as_dict(order) -> dict:
    return {
        "id": str(order.pk),
        "user_id": str(order.user_id),
        "status": order.status,
        "allowed_transitions": sorted(str(s) for s in allowed_transitions(order.status)),
        "total_amount": str(order.total_amount),
        "shipping_address": order.shipping_address,
        "order_date": order.order_date.isoformat(),
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.product.name,
                "quantity": item.quantity,
                "price": str(item.price),
                "line_total": str(item.line_total),
            }
            for item in order.items.all()
        ],
    }


class CheckoutValidateView(ApiView):
    """POST checks the cart against live stock without placing an order."""

    login_required = True

    def post(self, request):
        return JsonResponse(validate_cart(request.user).as_dict())


class CheckoutView(ApiView):
    """POST places an order from the cart.

    Body: ``{"shipping_address": {...}, "confirm": false}``. When stock
    adjustments occur and ``confirm`` is not set, answers 409
    ``confirmation_required`` with the adjusted lines.
    """

    login_required = True

    def post(self, request):
        data = json_body(request)
        confirm = data.get("confirm", False)
        if not isinstance(confirm, bool):
            raise BadRequest("confirm must be a boolean")

        result = services.checkout(request.user, data.get("shipping_address"), confirm=confirm)
        order = services.get_order(request.user, result.order.pk)
        return JsonResponse(
            {
                "order": order_as_dict(order),
                "adjustments": [a.as_dict() for a in result.adjustments],
            },
            status=201,
        )


class OrderListView(ApiView):
    """GET lists the signed-in user's orders."""

    login_required = True

    def get(self, request):
        orders = services.list_user_orders(request.user)
        return JsonResponse({"orders": [order_as_dict(o) for o in orders]})


class OrderDetailView(ApiView):
    login_required = True

    def get(self, request, order_id):
        return JsonResponse(order_as_dict(services.get_order(request.user, order_id)))


class AdminOrderListView(ApiView):
    """GET lists all orders, optionally ``?status=``."""

    admin_required = True

    def get(self, request):
        status = request.GET.get("status") or None
        if status and status not in OrderStatus.values:
            raise BadRequest(f"Unknown status: {status}")
        orders = services.list_orders(request.user, status=status)
        return JsonResponse({"orders": [order_as_dict(o) for o in orders]})


class AdminOrderStatusView(ApiView):
    """POST moves an order along its lifecycle: ``{"status": ..., "note": ...}``."""

    admin_required = True

    def post(self, request, order_id):
        data = json_body(request)
        new_status = data.get("status")
        if not new_status:
            raise BadRequest("status is required")
        if not isinstance(new_status, str):
            raise BadRequest("status must be a string")
        note = data.get("note", "")
        if not isinstance(note, str):
            raise BadRequest("note must be a string")

        order = services.transition_order(request.user, order_id, new_status, note=note)
        return JsonResponse(order_as_dict(services.get_order(request.user, order.pk)))
