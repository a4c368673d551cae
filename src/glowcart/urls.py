"""URL configuration for GlowCart project."""

from django.contrib import admin
from django.urls import include, path

from glowcart.core.views import health_check
from glowcart.orders.urls import staff_urlpatterns as order_staff_patterns

urlpatterns = [
    # Health check
    path("health/", health_check, name="health_check"),

    # Django admin
    path("admin/", admin.site.urls),

    # Authentication (sessions handled by django.contrib.auth)
    path("accounts/", include("django.contrib.auth.urls")),

    # Catalog
    path("shop/products/", include("glowcart.catalog.urls", namespace="catalog")),

    # Cart
    path("shop/cart/", include("glowcart.store.urls", namespace="store")),

    # Checkout and customer orders
    path("shop/", include("glowcart.orders.urls", namespace="orders")),

    # Staff order board
    path("staff/orders/", include((order_staff_patterns, "staff"), namespace="staff")),
]
