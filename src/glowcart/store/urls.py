from django.urls import path

from . import views

app_name = "store"

urlpatterns = [
    path("", views.CartView.as_view(), name="cart"),
    path("items/", views.CartItemsView.as_view(), name="cart-items"),
    path("items/<str:product_id>/", views.CartItemView.as_view(), name="cart-item"),
]
