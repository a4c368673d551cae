from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("checkout/validate/", views.CheckoutValidateView.as_view(), name="checkout-validate"),
    path("checkout/", views.CheckoutView.as_view(), name="checkout"),
    path("orders/", views.OrderListView.as_view(), name="order-list"),
    path("orders/<str:order_id>/", views.OrderDetailView.as_view(), name="order-detail"),
]

staff_urlpatterns = [
    path("", views.AdminOrderListView.as_view(), name="admin-order-list"),
    path("<str:order_id>/status/", views.AdminOrderStatusView.as_view(), name="admin-order-status"),
]
