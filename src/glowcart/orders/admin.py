from django.contrib import admin, messages
from django.core.exceptions import PermissionDenied

from glowcart.exceptions import StoreError

from . import services
from .models import Order, OrderItem, OrderStatus, OrderStatusEvent


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "price", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusEventInline(admin.TabularInline):
    model = OrderStatusEvent
    extra = 0
    can_delete = False
    readonly_fields = ("from_status", "to_status", "actor", "note", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


def _transition_action(status):
    def action(modeladmin, request, queryset):
        for order in queryset:
            try:
                services.transition_order(request.user, order.pk, status)
            except (StoreError, PermissionDenied) as e:
                modeladmin.message_user(request, f"Order {order.pk}: {e}", level=messages.ERROR)
            else:
                modeladmin.message_user(request, f"Order {order.pk} marked {status}")

    action.__name__ = f"mark_{status}"
    action.short_description = f"Mark selected orders as {OrderStatus(status).label.lower()}"
    return action


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "total_amount", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "user__email")
    readonly_fields = ("id", "user", "status", "total_amount", "shipping_address", "order_date", "created_at", "updated_at")
    inlines = [OrderItemInline, OrderStatusEventInline]
    actions = [
        _transition_action(OrderStatus.PROCESSING),
        _transition_action(OrderStatus.SHIPPED),
        _transition_action(OrderStatus.DELIVERED),
        _transition_action(OrderStatus.CANCELLED),
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        # Status moves only through the actions, which run the lifecycle checks
        return False
